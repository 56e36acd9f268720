"""Friend CRUD, group listing and CSV export."""
import logging
import uuid
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.models.friend import Friend
from socialiser.models.user import User
from socialiser.schemas.friend import FriendCreate, FriendGroupsResponse, FriendOut, FriendUpdate
from socialiser.services import audit as audit_svc
from socialiser.services.friends_csv import export_friends_csv

logger = logging.getLogger(__name__)

router = APIRouter()


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


async def _get_friend(db: AsyncSession, friend_id: uuid.UUID) -> Friend | None:
    return (await db.execute(select(Friend).where(Friend.id == friend_id))).scalar_one_or_none()


# ─── Collection ───

@router.get("", response_model=list[FriendOut], summary="List the caller's friends by name")
async def list_friends(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    result = await db.execute(
        select(Friend).where(Friend.user_id == current_user.id).order_by(Friend.name.asc())
    )
    return result.scalars().all()


@router.post("", response_model=FriendOut, status_code=status.HTTP_201_CREATED)
async def create_friend(
    body: FriendCreate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    friend = Friend(
        user_id=current_user.id,
        name=name,
        email=_clean(body.email),
        phone=_clean(body.phone),
        group=_clean(body.group),
    )
    db.add(friend)
    await db.commit()
    await db.refresh(friend)
    return friend


@router.get("/groups", response_model=FriendGroupsResponse, summary="Distinct friend groups")
async def list_groups(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    result = await db.execute(
        select(Friend.group)
        .where(Friend.user_id == current_user.id, Friend.group.is_not(None), func.trim(Friend.group) != "")
        .distinct()
        .order_by(Friend.group.asc())
    )
    return FriendGroupsResponse(groups=list(result.scalars().all()))


@router.get("/export", summary="Download friends as CSV (name,email,group)")
async def export_friends(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    result = await db.execute(
        select(Friend).where(Friend.user_id == current_user.id).order_by(Friend.name.asc())
    )
    content = export_friends_csv(result.scalars().all())
    filename = f"friends-export-{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ─── Item ───

@router.get("/{friend_id}", response_model=FriendOut)
async def get_friend(
    friend_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    friend = await _get_friend(db, friend_id)
    if friend is None or friend.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friend not found")
    return friend


@router.put("/{friend_id}", response_model=FriendOut)
async def update_friend(
    friend_id: uuid.UUID,
    body: FriendUpdate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    friend = await _get_friend(db, friend_id)
    if friend is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friend not found")
    if friend.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    if body.name is not None:
        name = body.name.strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
        friend.name = name
    for field in ("email", "phone", "group"):
        if field in body.model_fields_set:
            setattr(friend, field, _clean(getattr(body, field)))

    db.add(friend)
    await db.commit()
    await db.refresh(friend)
    return friend


@router.delete("/{friend_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_friend(
    friend_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    friend = await _get_friend(db, friend_id)
    if friend is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friend not found")
    if friend.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    audit_svc.log(
        db,
        action="friend_deleted",
        entity_type="friend",
        entity_id=friend.id,
        actor_id=current_user.id,
        actor_email=current_user.email,
        before={"name": friend.name, "email": friend.email, "group": friend.group},
    )
    await db.delete(friend)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
