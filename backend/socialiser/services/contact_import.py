"""Bulk friend import with duplicate reconciliation.

Rows arrive already parsed (header names lower-cased and trimmed). Each row is
validated, then classified against two name sets:

  * existing names: the owner's stored friends, read once per import;
  * batch names: names accepted earlier in the same import.

Accepted rows are written with a single bulk INSERT. Row-level problems never
raise; they are reported in the returned ImportOutcome. Only an empty batch
and database failures propagate to the caller.
"""
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.models.friend import IMPORTED_CONTACT_NOTE, Friend

logger = logging.getLogger(__name__)

# ─── Messages ───

NAME_REQUIRED = "Name is required and cannot be empty"
EXISTING_DUPLICATE = "Friend with this name already exists"
BATCH_DUPLICATE = "Duplicate name within import file"


class EmptyImportError(ValueError):
    """Raised when an import is attempted with zero rows."""


# ─── Result dataclasses ───

@dataclass
class ValidatedContact:
    name: str
    email: str | None = None
    group: str | None = None


@dataclass
class RowError:
    row: int
    data: Any
    error: str


@dataclass
class RowDuplicate:
    row: int
    name: str
    reason: str


@dataclass
class ImportOutcome:
    total_rows: int
    successful_imports: int = 0
    errors: list[RowError] = field(default_factory=list)
    duplicates: list[RowDuplicate] = field(default_factory=list)
    imported_friends: list[ValidatedContact] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.successful_imports > 0


# ─── Row validation ───

def _optional_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def validate_row(raw: Any) -> tuple[ValidatedContact | None, str | None]:
    """Return (contact, None) for a usable row or (None, error message) otherwise."""
    if not isinstance(raw, Mapping):
        return None, NAME_REQUIRED
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        return None, NAME_REQUIRED
    return (
        ValidatedContact(
            name=name.strip(),
            email=_optional_text(raw.get("email")),
            group=_optional_text(raw.get("group")),
        ),
        None,
    )


# ─── Duplicate classification ───

def classify_duplicate(
    contact: ValidatedContact,
    existing_names: frozenset[str],
    batch_names: set[str],
) -> str | None:
    """Return a duplicate reason, or None after claiming the name for this batch.

    Stored friends take precedence: a name that already exists is always
    reported as such, even if it also repeats within the file.
    """
    key = contact.name.lower()
    if key in existing_names:
        return EXISTING_DUPLICATE
    if key in batch_names:
        return BATCH_DUPLICATE
    batch_names.add(key)
    return None


# ─── Batch import ───

async def load_existing_names(db: AsyncSession, owner_id: uuid.UUID) -> frozenset[str]:
    result = await db.execute(select(Friend.name).where(Friend.user_id == owner_id))
    return frozenset(name.lower() for name in result.scalars().all())


async def import_friends(
    db: AsyncSession,
    owner_id: uuid.UUID,
    rows: Sequence[Any],
) -> ImportOutcome:
    """Validate, deduplicate and bulk-insert friend rows for one owner.

    Args:
        db: Async session. The INSERT is flushed but not committed; the caller
            owns the transaction.
        owner_id: User whose friend list is being imported into.
        rows: Parsed CSV rows in file order.

    Raises:
        EmptyImportError: rows is empty.
    """
    if not rows:
        raise EmptyImportError("CSV file is empty or contains no valid data")

    existing_names = await load_existing_names(db, owner_id)
    batch_names: set[str] = set()
    outcome = ImportOutcome(total_rows=len(rows))
    accepted: list[ValidatedContact] = []

    for idx, raw in enumerate(rows, start=1):
        contact, error = validate_row(raw)
        if contact is None:
            outcome.errors.append(RowError(row=idx, data=raw, error=error))
            continue

        reason = classify_duplicate(contact, existing_names, batch_names)
        if reason is not None:
            outcome.duplicates.append(RowDuplicate(row=idx, name=contact.name, reason=reason))
            continue

        accepted.append(contact)

    if accepted:
        records = [
            {
                "name": c.name,
                "email": c.email,
                "group": c.group,
                "notes": IMPORTED_CONTACT_NOTE,
                "user_id": owner_id,
            }
            for c in accepted
        ]
        result = await db.execute(insert(Friend).returning(Friend.id), records)
        created_ids = result.scalars().all()
        outcome.successful_imports = len(created_ids)
        outcome.imported_friends = accepted

    logger.info(
        "import_friends: owner=%s rows=%d imported=%d duplicates=%d errors=%d",
        owner_id,
        outcome.total_rows,
        outcome.successful_imports,
        len(outcome.duplicates),
        len(outcome.errors),
    )
    return outcome
