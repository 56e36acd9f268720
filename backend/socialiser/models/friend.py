from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from socialiser.db.base import Base, OwnedMixin, TimestampMixin, UUIDMixin

IMPORTED_CONTACT_NOTE = "Imported contact"


class Friend(Base, UUIDMixin, TimestampMixin, OwnedMixin):
    """A contact the owner can invite to activity instances.

    Names are not unique per owner at the database level; the CSV importer
    deduplicates case-insensitively against what is already stored.
    """

    __tablename__ = "friends"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    group: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)  # "Imported contact" for CSV rows
