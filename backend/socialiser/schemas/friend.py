"""Pydantic schemas for friend endpoints."""
import uuid
from datetime import datetime

from pydantic import Field

from socialiser.schemas.common import CamelModel


class FriendCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    email: str | None = None
    phone: str | None = None
    group: str | None = None


class FriendUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = None
    phone: str | None = None
    group: str | None = None


class FriendOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    email: str | None
    phone: str | None
    group: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class FriendStub(CamelModel):
    """Friend as shown to invitees: no contact details."""

    id: uuid.UUID
    name: str


class FriendGroupsResponse(CamelModel):
    groups: list[str]
