import uuid

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialiser.db.base import Base, OwnedMixin, TimestampMixin, UUIDMixin
from socialiser.models.core_value import CoreValue


class Activity(Base, UUIDMixin, TimestampMixin, OwnedMixin):
    """A reusable activity template ("Board game night"); instances schedule it."""

    __tablename__ = "activities"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    values: Mapped[list["ActivityValue"]] = relationship(
        back_populates="activity", cascade="all, delete-orphan"
    )
    instances: Mapped[list["ActivityInstance"]] = relationship(  # noqa: F821
        back_populates="activity", cascade="all, delete-orphan"
    )


class ActivityValue(Base, UUIDMixin):
    """Link table between an activity and one of the owner's core values."""

    __tablename__ = "activity_values"
    __table_args__ = (UniqueConstraint("activity_id", "value_id", name="uq_activity_value"),)

    activity_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("core_values.id", ondelete="CASCADE"), nullable=False, index=True
    )

    activity: Mapped[Activity] = relationship(back_populates="values")
    value: Mapped[CoreValue] = relationship()
