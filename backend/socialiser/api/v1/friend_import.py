"""CSV bulk import of friends."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.config import settings
from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.models.user import User
from socialiser.schemas.imports import FriendImportResult
from socialiser.services import audit as audit_svc
from socialiser.services.contact_import import EmptyImportError, import_friends
from socialiser.services.friends_csv import CSVParseError, parse_friends_csv

logger = logging.getLogger(__name__)

router = APIRouter()


def _size_label(max_bytes: int) -> str:
    return f"{max_bytes // (1024 * 1024)}MB"


# ─── POST /friends/import ───

@router.post(
    "/import",
    response_model=FriendImportResult,
    summary="Bulk import friends from a CSV file (name, email, group)",
)
async def import_friends_csv(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    file: UploadFile | None = File(default=None),
):
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only CSV files are allowed")

    max_bytes = settings.IMPORT_MAX_BYTES
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size must be less than {_size_label(max_bytes)}",
        )

    try:
        rows = parse_friends_csv(content)
    except CSVParseError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc), "details": exc.details},
        )

    try:
        outcome = await import_friends(db, current_user.id, rows)
        audit_svc.log(
            db,
            action="friends_imported",
            entity_type="friend",
            actor_id=current_user.id,
            actor_email=current_user.email,
            after={
                "total_rows": outcome.total_rows,
                "imported": outcome.successful_imports,
                "duplicates": len(outcome.duplicates),
                "errors": len(outcome.errors),
            },
            notes=file.filename,
        )
        await db.commit()
    except EmptyImportError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except SQLAlchemyError:
        await db.rollback()
        logger.error("import_friends_csv: store failure for user %s", current_user.id, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to import CSV file",
        )

    return FriendImportResult.from_outcome(outcome)
