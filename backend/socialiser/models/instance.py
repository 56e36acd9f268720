import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from socialiser.db.base import Base, OwnedMixin, TimestampMixin, UUIDMixin
from socialiser.models.activity import Activity
from socialiser.models.friend import Friend


class VenueType(str, enum.Enum):
    indoor = "indoor"
    outdoor = "outdoor"
    online = "online"
    hybrid = "hybrid"


class ParticipationStatus(str, enum.Enum):
    INVITED = "INVITED"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"


class ActivityInstance(Base, UUIDMixin, TimestampMixin, OwnedMixin):
    """One scheduled occurrence of an activity."""

    __tablename__ = "activity_instances"

    activity_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_all_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    allow_external_guests: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Rich details (usually filled from an AI suggestion)
    custom_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    venue: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    city: Mapped[str | None] = mapped_column(String(255), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    detailed_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_info: Mapped[str | None] = mapped_column(String(500), nullable=True)
    venue_type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # VenueType
    price_info: Mapped[str | None] = mapped_column(String(255), nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    activity: Mapped[Activity] = relationship(back_populates="instances")
    participations: Mapped[list["Participation"]] = relationship(
        back_populates="instance", cascade="all, delete-orphan"
    )
    public_rsvps: Mapped[list["PublicRSVP"]] = relationship(
        back_populates="instance", cascade="all, delete-orphan", order_by="PublicRSVP.created_at.desc()"
    )

    @property
    def title(self) -> str:
        return self.custom_title or self.activity.name


class Participation(Base, UUIDMixin, TimestampMixin):
    """A friend invited to an instance; the invite token backs the personal invite link."""

    __tablename__ = "participations"

    instance_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("activity_instances.id", ondelete="CASCADE"), nullable=False, index=True
    )
    friend_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("friends.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ParticipationStatus.INVITED.value)
    invite_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    instance: Mapped[ActivityInstance] = relationship(back_populates="participations")
    friend: Mapped[Friend] = relationship()


class PublicRSVP(Base, UUIDMixin, TimestampMixin):
    """RSVP submitted through the public event page, by an invited friend or an external guest."""

    __tablename__ = "public_rsvps"

    instance_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("activity_instances.id", ondelete="CASCADE"), nullable=False, index=True
    )
    friend_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("friends.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    instance: Mapped[ActivityInstance] = relationship(back_populates="public_rsvps")
