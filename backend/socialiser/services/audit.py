"""Audit log helper: append-only writes to the audit_logs table."""
import json
import logging
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.models.audit import AuditLog

logger = logging.getLogger(__name__)


def log(
    db: AsyncSession,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID | str | None = None,
    actor_id: uuid.UUID | str | None = None,
    actor_email: str | None = None,
    before: Any | None = None,
    after: Any | None = None,
    notes: str | None = None,
) -> AuditLog:
    """Stage a single audit log entry on the session.

    The entry is only added; it is written by the caller's next flush/commit so
    it shares the transaction of the change it describes.

    Args:
        action: Short verb, e.g. 'friends_imported', 'instance_deleted'.
        entity_type: Domain name, e.g. 'friend', 'activity_instance'.
        entity_id: PK of the affected record (None for batch actions).
        actor_id: User who performed the action.
        actor_email: Denormalised email (preserved if user is later deleted).
        before: Snapshot of state before the action (JSON-serialisable).
        after: Snapshot of state after the action.
        notes: Free-text annotation.
    """
    entry = AuditLog(
        actor_id=uuid.UUID(str(actor_id)) if actor_id else None,
        actor_email=actor_email,
        action=action,
        entity_type=entity_type,
        entity_id=uuid.UUID(str(entity_id)) if entity_id else None,
        before_state=json.dumps(before, default=str) if before is not None else None,
        after_state=json.dumps(after, default=str) if after is not None else None,
        notes=notes,
    )
    db.add(entry)
    logger.debug("Audit: %s %s/%s", action, entity_type, entity_id)
    return entry
