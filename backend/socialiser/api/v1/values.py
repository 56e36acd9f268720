"""Core values CRUD. Names are unique per owner, compared case-insensitively."""
import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.models.core_value import CoreValue
from socialiser.models.user import User
from socialiser.schemas.core_value import CoreValueCreate, CoreValueOut, CoreValueUpdate
from socialiser.services import audit as audit_svc

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_VALUE = "A value with this name already exists"


async def _name_taken(
    db: AsyncSession, owner_id: uuid.UUID, name: str, exclude_id: uuid.UUID | None = None
) -> bool:
    stmt = select(CoreValue.id).where(
        CoreValue.user_id == owner_id, func.lower(CoreValue.name) == name.lower()
    )
    if exclude_id is not None:
        stmt = stmt.where(CoreValue.id != exclude_id)
    return (await db.execute(stmt)).first() is not None


async def _get_value(db: AsyncSession, value_id: uuid.UUID) -> CoreValue | None:
    return (await db.execute(select(CoreValue).where(CoreValue.id == value_id))).scalar_one_or_none()


# ─── List / create ───

@router.get("", response_model=list[CoreValueOut], summary="List the caller's core values")
async def list_values(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    result = await db.execute(
        select(CoreValue).where(CoreValue.user_id == current_user.id).order_by(CoreValue.name.asc())
    )
    return result.scalars().all()


@router.post("", response_model=CoreValueOut, status_code=status.HTTP_201_CREATED)
async def create_value(
    body: CoreValueCreate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    if await _name_taken(db, current_user.id, name):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_VALUE)

    value = CoreValue(user_id=current_user.id, name=name, description=body.description)
    db.add(value)
    await db.commit()
    await db.refresh(value)
    return value


# ─── Detail / update / delete ───

@router.get("/{value_id}", response_model=CoreValueOut)
async def get_value(
    value_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    value = await _get_value(db, value_id)
    if value is None or value.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Value not found")
    return value


@router.put("/{value_id}", response_model=CoreValueOut)
async def update_value(
    value_id: uuid.UUID,
    body: CoreValueUpdate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    value = await _get_value(db, value_id)
    if value is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Value not found")
    if value.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    if body.name is not None:
        name = body.name.strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
        if await _name_taken(db, current_user.id, name, exclude_id=value.id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_VALUE)
        value.name = name
    if "description" in body.model_fields_set:
        value.description = body.description

    db.add(value)
    await db.commit()
    await db.refresh(value)
    return value


@router.delete("/{value_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_value(
    value_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    value = await _get_value(db, value_id)
    if value is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Value not found")
    if value.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    audit_svc.log(
        db,
        action="value_deleted",
        entity_type="core_value",
        entity_id=value.id,
        actor_id=current_user.id,
        actor_email=current_user.email,
        before={"name": value.name},
    )
    await db.delete(value)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
