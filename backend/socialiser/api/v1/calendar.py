import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.models.instance import ActivityInstance
from socialiser.models.user import User
from socialiser.schemas.instance import GoogleCalendarLink
from socialiser.services.calendar_export import build_ics, google_calendar_url, ics_filename
from socialiser.services.instances import load_instance

router = APIRouter()


async def _owned_event(db: AsyncSession, instance_id: uuid.UUID, user: User) -> ActivityInstance:
    instance = await load_instance(db, instance_id)
    if instance is None or instance.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return instance


@router.get("/google/{instance_id}", response_model=GoogleCalendarLink, summary="Google Calendar template link")
async def google_calendar_link(
    instance_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    instance = await _owned_event(db, instance_id, current_user)
    return GoogleCalendarLink(url=google_calendar_url(instance))


@router.get("/{instance_id}", summary="Download the instance as an ICS file")
async def download_ics(
    instance_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    instance = await _owned_event(db, instance_id, current_user)
    return Response(
        content=build_ics(instance),
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{ics_filename(instance)}"'},
    )
