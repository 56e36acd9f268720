"""AI activity discovery endpoint."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.ai.discovery import (
    DiscoveryError,
    DiscoveryQuery,
    MissingAPIKeyError,
    ModelOptions,
    discover_activities,
)
from socialiser.core.config import settings
from socialiser.core.deps import get_current_user
from socialiser.core.security import decrypt_secret
from socialiser.db.session import get_session
from socialiser.models.user import User
from socialiser.schemas.ai import DiscoveryOption, DiscoveryRequest, DiscoveryResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _api_key_for(user: User) -> str:
    if user.google_api_key:
        key = decrypt_secret(user.google_api_key)
        if key:
            return key
    return settings.GOOGLE_API_KEY


def _model_options(user: User) -> ModelOptions:
    prefs = user.preferences or {}
    if not user.is_admin:
        return ModelOptions()
    return ModelOptions(
        preferred_model=prefs.get("preferredModel") or None,
        system_prompt=prefs.get("systemPrompt") or None,
        enable_google_search=bool(prefs.get("enableGoogleSearch")),
    )


def _usable_options(raw_options: list) -> list[DiscoveryOption]:
    """Named options that fit the response shape; anything else is dropped."""
    options = []
    for raw in raw_options:
        if not isinstance(raw, dict) or not raw.get("name"):
            continue
        try:
            options.append(DiscoveryOption.model_validate(raw))
        except ValidationError as exc:
            logger.warning("ai_discovery: dropping malformed option %r (%d errors)", raw.get("name"), exc.error_count())
    return options


@router.post("/ai-discovery", response_model=DiscoveryResponse, summary="Suggest concrete options for an activity type")
async def ai_discovery(
    body: DiscoveryRequest,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    activity_name = body.activity_name.strip()
    if not activity_name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Activity name is required")

    query = DiscoveryQuery(
        activity_name=activity_name,
        location=body.location,
        preferences=body.preferences,
        date_start=body.date_range.start if body.date_range else None,
        date_end=body.date_range.end if body.date_range else None,
    )

    try:
        raw_options = await discover_activities(
            db,
            query,
            api_key=_api_key_for(current_user),
            user_id=current_user.id,
            options=_model_options(current_user),
        )
    except MissingAPIKeyError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    except DiscoveryError as exc:
        # Keep the ai_call_logs rows for the failed attempts.
        await db.commit()
        logger.error("ai_discovery: failed for user %s: %s", current_user.id, exc.details)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": str(exc), "details": exc.details},
        )

    await db.commit()
    return DiscoveryResponse(options=_usable_options(raw_options), activity_type=activity_name)
