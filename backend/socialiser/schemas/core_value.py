import uuid
from datetime import datetime

from pydantic import Field

from socialiser.schemas.common import CamelModel


class CoreValueCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class CoreValueUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class CoreValueOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime
