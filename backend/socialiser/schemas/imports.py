"""Pydantic schemas for the friends CSV import result."""
from typing import Any

from socialiser.schemas.common import CamelModel
from socialiser.services.contact_import import ImportOutcome


class ImportRowError(CamelModel):
    row: int
    data: Any
    error: str


class ImportDuplicate(CamelModel):
    row: int
    name: str
    reason: str


class ImportedFriend(CamelModel):
    name: str
    email: str | None
    group: str | None


class FriendImportResult(CamelModel):
    success: bool
    total_rows: int
    successful_imports: int
    errors: list[ImportRowError]
    duplicates: list[ImportDuplicate]
    imported_friends: list[ImportedFriend]

    @classmethod
    def from_outcome(cls, outcome: ImportOutcome) -> "FriendImportResult":
        return cls(
            success=outcome.success,
            total_rows=outcome.total_rows,
            successful_imports=outcome.successful_imports,
            errors=[ImportRowError(row=e.row, data=e.data, error=e.error) for e in outcome.errors],
            duplicates=[
                ImportDuplicate(row=d.row, name=d.name, reason=d.reason) for d in outcome.duplicates
            ],
            imported_friends=[
                ImportedFriend(name=c.name, email=c.email, group=c.group)
                for c in outcome.imported_friends
            ],
        )
