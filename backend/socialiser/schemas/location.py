import uuid
from datetime import datetime

from pydantic import Field

from socialiser.schemas.common import CamelModel


class LocationCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    type: str = Field(default="Venue", max_length=50)
    address: str | None = Field(default=None, max_length=500)
    description: str | None = None
    website: str | None = Field(default=None, max_length=500)


class LocationUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)
    description: str | None = None
    website: str | None = Field(default=None, max_length=500)


class LocationOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    type: str
    address: str | None
    description: str | None
    website: str | None
    created_at: datetime
    updated_at: datetime
