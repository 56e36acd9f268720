import uuid
from datetime import datetime

from pydantic import Field

from socialiser.schemas.common import CamelModel
from socialiser.schemas.core_value import CoreValueOut


class ActivityCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    value_ids: list[uuid.UUID] = []


class ActivityUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    value_ids: list[uuid.UUID] | None = None


class ActivityValueOut(CamelModel):
    id: uuid.UUID
    activity_id: uuid.UUID
    value_id: uuid.UUID
    value: CoreValueOut


class ActivityOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime
    values: list[ActivityValueOut] = []
    instance_count: int = 0


class ActivityStub(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
