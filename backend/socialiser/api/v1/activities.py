"""Activity CRUD. Activities are tagged with the owner's core values."""
import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.models.activity import Activity, ActivityValue
from socialiser.models.core_value import CoreValue
from socialiser.models.instance import ActivityInstance
from socialiser.models.user import User
from socialiser.schemas.activity import ActivityCreate, ActivityOut, ActivityUpdate, ActivityValueOut
from socialiser.services import audit as audit_svc

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Helpers ───

async def _check_value_ownership(db: AsyncSession, owner_id: uuid.UUID, value_ids: list[uuid.UUID]) -> None:
    wanted = set(value_ids)
    if not wanted:
        return
    result = await db.execute(
        select(func.count(CoreValue.id)).where(CoreValue.id.in_(wanted), CoreValue.user_id == owner_id)
    )
    if result.scalar_one() != len(wanted):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Some values do not belong to the authenticated user",
        )


async def _load_activity(db: AsyncSession, activity_id: uuid.UUID) -> Activity | None:
    stmt = (
        select(Activity)
        .where(Activity.id == activity_id)
        .options(selectinload(Activity.values).selectinload(ActivityValue.value))
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def _instance_count(db: AsyncSession, activity_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count(ActivityInstance.id)).where(ActivityInstance.activity_id == activity_id)
    )
    return int(result.scalar_one())


def _to_out(activity: Activity, instance_count: int) -> ActivityOut:
    return ActivityOut(
        id=activity.id,
        user_id=activity.user_id,
        name=activity.name,
        description=activity.description,
        created_at=activity.created_at,
        updated_at=activity.updated_at,
        values=[ActivityValueOut.model_validate(av) for av in activity.values],
        instance_count=instance_count,
    )


# ─── List / create ───

@router.get("", response_model=list[ActivityOut], summary="List the caller's activities, newest first")
async def list_activities(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    count_sq = (
        select(ActivityInstance.activity_id, func.count(ActivityInstance.id).label("instance_count"))
        .group_by(ActivityInstance.activity_id)
        .subquery()
    )
    stmt = (
        select(Activity, func.coalesce(count_sq.c.instance_count, 0).label("instance_count"))
        .outerjoin(count_sq, Activity.id == count_sq.c.activity_id)
        .where(Activity.user_id == current_user.id)
        .options(selectinload(Activity.values).selectinload(ActivityValue.value))
        .order_by(Activity.created_at.desc())
    )
    rows = (await db.execute(stmt)).all()
    return [_to_out(activity, int(instance_count)) for activity, instance_count in rows]


@router.post("", response_model=ActivityOut, status_code=status.HTTP_201_CREATED)
async def create_activity(
    body: ActivityCreate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    await _check_value_ownership(db, current_user.id, body.value_ids)

    activity = Activity(user_id=current_user.id, name=name, description=body.description)
    db.add(activity)
    await db.flush()
    for value_id in dict.fromkeys(body.value_ids):
        db.add(ActivityValue(activity_id=activity.id, value_id=value_id))
    await db.commit()

    activity = await _load_activity(db, activity.id)
    return _to_out(activity, 0)


# ─── Detail / update / delete ───

@router.get("/{activity_id}", response_model=ActivityOut)
async def get_activity(
    activity_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    activity = await _load_activity(db, activity_id)
    if activity is None or activity.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return _to_out(activity, await _instance_count(db, activity.id))


@router.put("/{activity_id}", response_model=ActivityOut)
async def update_activity(
    activity_id: uuid.UUID,
    body: ActivityUpdate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    activity = await _load_activity(db, activity_id)
    if activity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    if activity.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    if body.name is not None:
        name = body.name.strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
        activity.name = name
    if "description" in body.model_fields_set:
        activity.description = body.description

    if body.value_ids is not None:
        await _check_value_ownership(db, current_user.id, body.value_ids)
        await db.execute(delete(ActivityValue).where(ActivityValue.activity_id == activity.id))
        for value_id in dict.fromkeys(body.value_ids):
            db.add(ActivityValue(activity_id=activity.id, value_id=value_id))

    db.add(activity)
    await db.commit()

    db.expire_all()
    activity = await _load_activity(db, activity_id)
    return _to_out(activity, await _instance_count(db, activity.id))


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(
    activity_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    activity = await _load_activity(db, activity_id)
    if activity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    if activity.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    audit_svc.log(
        db,
        action="activity_deleted",
        entity_type="activity",
        entity_id=activity.id,
        actor_id=current_user.id,
        actor_email=current_user.email,
        before={"name": activity.name},
    )
    await db.delete(activity)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
