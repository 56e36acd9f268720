from fastapi import APIRouter

from socialiser.api.v1 import activities, ai_discovery, auth, calendar, friend_import, friends
from socialiser.api.v1 import instances, invites, locations, public_events, settings, values

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(values.router, prefix="/values", tags=["values"])
api_router.include_router(activities.router, prefix="/activities", tags=["activities"])
api_router.include_router(instances.router, prefix="/instances", tags=["instances"])
api_router.include_router(friend_import.router, prefix="/friends", tags=["friends"])
api_router.include_router(friends.router, prefix="/friends", tags=["friends"])
api_router.include_router(locations.router, prefix="/locations", tags=["locations"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["calendar"])
api_router.include_router(public_events.router, prefix="/public-events", tags=["public"])
api_router.include_router(invites.router, prefix="/invites", tags=["public"])
api_router.include_router(ai_discovery.router, tags=["ai"])
