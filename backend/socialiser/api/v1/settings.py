"""Per-user settings: display name, location preferences, AI preferences and API key."""
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.deps import get_current_user
from socialiser.core.security import API_KEY_MASK, encrypt_secret
from socialiser.db.session import get_session
from socialiser.models.user import User
from socialiser.schemas.settings import ADMIN_ONLY_KEYS, SettingsUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _settings_payload(user: User) -> dict[str, Any]:
    payload: dict[str, Any] = dict(user.preferences or {})
    if not user.is_admin:
        for key in ADMIN_ONLY_KEYS:
            payload.pop(key, None)
    payload.update(
        name=user.name or "",
        isAdmin=user.is_admin,
        hasApiKey=bool(user.google_api_key),
        maskedApiKey=API_KEY_MASK if user.google_api_key else "",
    )
    return payload


@router.get("", summary="Get the caller's settings")
async def get_settings(
    current_user: Annotated[User, Depends(get_current_user)],
):
    return _settings_payload(current_user)


@router.put("", summary="Update the caller's settings (admin-only keys ignored for users)")
async def update_settings(
    body: SettingsUpdate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    changes = body.model_dump(exclude_unset=True, by_alias=True)
    prefs = dict(current_user.preferences or {})

    if changes.get("name"):
        current_user.name = changes["name"].strip()

    for key in ("defaultLocation", "socialLocation"):
        if key in changes:
            prefs[key] = changes[key]

    if current_user.is_admin:
        for key in ADMIN_ONLY_KEYS:
            if key in changes:
                prefs[key] = changes[key]
    elif any(key in changes for key in ADMIN_ONLY_KEYS):
        logger.info("update_settings: ignoring admin-only keys for user %s", current_user.id)

    if changes.get("googleApiKey") is not None:
        api_key = changes["googleApiKey"].strip()
        if not api_key:
            current_user.google_api_key = None
        elif api_key != API_KEY_MASK:
            current_user.google_api_key = encrypt_secret(api_key)

    # JSON columns only detect reassignment.
    current_user.preferences = prefs
    db.add(current_user)
    await db.commit()
    return _settings_payload(current_user)
