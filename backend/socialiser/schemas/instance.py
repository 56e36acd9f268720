"""Pydantic schemas for activity instances and their participations.

The web client names the start and end of an instance ``datetime`` and
``endDate``; those two fields carry explicit aliases, everything else is
camelCased by the base model.
"""
import uuid
from datetime import datetime, timezone

from pydantic import Field, field_validator

from socialiser.models.instance import ParticipationStatus, VenueType
from socialiser.schemas.activity import ActivityStub
from socialiser.schemas.common import CamelModel
from socialiser.schemas.friend import FriendOut


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes from the client are taken as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class InstanceDetails(CamelModel):
    """Optional rich details, usually filled from an AI discovery suggestion."""

    custom_title: str | None = Field(default=None, max_length=255)
    venue: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=255)
    state: str | None = Field(default=None, max_length=100)
    zip_code: str | None = Field(default=None, max_length=20)
    detailed_description: str | None = None
    requirements: str | None = None
    contact_info: str | None = Field(default=None, max_length=500)
    venue_type: VenueType | None = None
    price_info: str | None = Field(default=None, max_length=255)
    capacity: int | None = Field(default=None, gt=0)


class InstanceCreate(InstanceDetails):
    activity_id: uuid.UUID
    starts_at: datetime = Field(alias="datetime")
    ends_at: datetime | None = Field(default=None, alias="endDate")
    is_all_day: bool = False
    location: str | None = Field(default=None, max_length=500)
    notes: str | None = None
    invited_friends: list[uuid.UUID] = []
    allow_external_guests: bool = True

    utc_times = field_validator("starts_at", "ends_at")(_as_utc)


class InstanceUpdate(InstanceDetails):
    starts_at: datetime | None = Field(default=None, alias="datetime")
    ends_at: datetime | None = Field(default=None, alias="endDate")
    is_all_day: bool | None = None
    location: str | None = Field(default=None, max_length=500)
    notes: str | None = None
    friend_ids: list[uuid.UUID] | None = None
    allow_external_guests: bool | None = None

    utc_times = field_validator("starts_at", "ends_at")(_as_utc)


class ParticipationOut(CamelModel):
    id: uuid.UUID
    instance_id: uuid.UUID
    friend_id: uuid.UUID
    status: ParticipationStatus
    invite_token: str
    friend: FriendOut


class InstanceOut(InstanceDetails):
    id: uuid.UUID
    user_id: uuid.UUID
    activity_id: uuid.UUID
    starts_at: datetime = Field(alias="datetime")
    ends_at: datetime | None = Field(default=None, alias="endDate")
    is_all_day: bool
    location: str | None
    notes: str | None
    allow_external_guests: bool
    created_at: datetime
    updated_at: datetime
    activity: ActivityStub
    participations: list[ParticipationOut] = []


# ─── Sharing ───

class GoogleCalendarLink(CamelModel):
    url: str


class WhatsAppShare(CamelModel):
    message: str
    url: str
