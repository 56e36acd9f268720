from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from socialiser.db.base import Base, OwnedMixin, TimestampMixin, UUIDMixin


class CoreValue(Base, UUIDMixin, TimestampMixin, OwnedMixin):
    """Something the owner cares about (e.g. "Family Time"); activities are tagged with values."""

    __tablename__ = "core_values"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
