from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from socialiser.db.base import Base, OwnedMixin, TimestampMixin, UUIDMixin


class Location(Base, UUIDMixin, TimestampMixin, OwnedMixin):
    """A saved place the owner likes to meet at."""

    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="Venue")
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
