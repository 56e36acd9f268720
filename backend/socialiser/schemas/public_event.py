"""Schemas for the unauthenticated event page, RSVPs and invite links.

Nothing here exposes friend contact details or owner data beyond a display name.
"""
import uuid
from datetime import datetime

from pydantic import Field

from socialiser.schemas.common import CamelModel
from socialiser.schemas.friend import FriendStub
from socialiser.schemas.instance import InstanceDetails


class PublicActivity(CamelModel):
    name: str
    description: str | None
    values: list[str] = []


class PublicEventOut(InstanceDetails):
    id: uuid.UUID
    title: str
    starts_at: datetime = Field(alias="datetime")
    ends_at: datetime | None = Field(default=None, alias="endDate")
    is_all_day: bool
    location: str | None
    allow_external_guests: bool
    activity: PublicActivity
    participant_count: int
    participant_names: list[str]


class PublicRSVPCreate(CamelModel):
    name: str = Field(default="", max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    message: str | None = None
    invite_token: str | None = None


class PublicRSVPOut(CamelModel):
    id: uuid.UUID
    friend_id: uuid.UUID | None
    name: str
    message: str | None
    created_at: datetime


class RSVPSubmitted(CamelModel):
    success: bool = True
    message: str
    id: uuid.UUID


class InviteOut(CamelModel):
    id: uuid.UUID
    status: str
    invite_token: str
    owner_name: str
    friend: FriendStub
    instance: PublicEventOut
    rsvps: list[PublicRSVPOut] = []


def public_event_view(instance) -> PublicEventOut:
    """Sanitized event view built from an instance loaded with activity, values and participants."""
    details = InstanceDetails.model_validate(instance).model_dump()
    return PublicEventOut(
        id=instance.id,
        title=instance.title,
        starts_at=instance.starts_at,
        ends_at=instance.ends_at,
        is_all_day=instance.is_all_day,
        location=instance.location,
        allow_external_guests=instance.allow_external_guests,
        activity=PublicActivity(
            name=instance.activity.name,
            description=instance.activity.description,
            values=[av.value.name for av in instance.activity.values],
        ),
        participant_count=len(instance.participations),
        participant_names=[p.friend.name for p in instance.participations],
        **details,
    )
