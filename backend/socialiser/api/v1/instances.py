"""Activity instances: scheduling, invitations, RSVP removal and WhatsApp sharing."""
import logging
import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.models.activity import Activity
from socialiser.models.instance import ActivityInstance, Participation, PublicRSVP
from socialiser.models.user import User
from socialiser.schemas.instance import (
    InstanceCreate,
    InstanceDetails,
    InstanceOut,
    InstanceUpdate,
    WhatsAppShare,
)
from socialiser.services import audit as audit_svc
from socialiser.services import whatsapp
from socialiser.services.instances import (
    ForeignFriendError,
    check_friend_ownership,
    instance_load_options,
    invite_friends,
    load_instance,
)

logger = logging.getLogger(__name__)

router = APIRouter()

END_BEFORE_START = "End date cannot be before start date"
DETAIL_FIELDS = tuple(InstanceDetails.model_fields)


# ─── Helpers ───

def _detail_values(body: InstanceDetails, only_set: bool) -> dict[str, Any]:
    fields = body.model_fields_set if only_set else set(DETAIL_FIELDS)
    values = {}
    for name in DETAIL_FIELDS:
        if name not in fields:
            continue
        value = getattr(body, name)
        values[name] = value.value if name == "venue_type" and value is not None else value
    return values


async def _owned_instance(db: AsyncSession, instance_id: uuid.UUID, user: User) -> ActivityInstance:
    """404 when missing, 403 when owned by someone else."""
    instance = await load_instance(db, instance_id)
    if instance is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Instance not found")
    if instance.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return instance


# ─── List / create ───

@router.get("", response_model=list[InstanceOut], summary="List scheduled instances, soonest first")
async def list_instances(
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    activity_id: uuid.UUID | None = Query(default=None, alias="activityId"),
):
    stmt = (
        select(ActivityInstance)
        .where(ActivityInstance.user_id == current_user.id)
        .options(*instance_load_options())
        .order_by(ActivityInstance.starts_at.asc())
    )
    if activity_id is not None:
        stmt = stmt.where(ActivityInstance.activity_id == activity_id)
    return (await db.execute(stmt)).scalars().all()


@router.post("", response_model=InstanceOut, status_code=status.HTTP_201_CREATED)
async def create_instance(
    body: InstanceCreate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    if body.ends_at is not None and body.ends_at < body.starts_at:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=END_BEFORE_START)

    activity = (
        await db.execute(
            select(Activity).where(Activity.id == body.activity_id, Activity.user_id == current_user.id)
        )
    ).scalar_one_or_none()
    if activity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found or access denied")

    try:
        await check_friend_ownership(db, current_user.id, body.invited_friends)
    except ForeignFriendError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))

    instance = ActivityInstance(
        user_id=current_user.id,
        activity_id=activity.id,
        starts_at=body.starts_at,
        ends_at=body.ends_at,
        is_all_day=body.is_all_day,
        location=body.location or None,
        notes=body.notes or None,
        allow_external_guests=body.allow_external_guests,
        **_detail_values(body, only_set=False),
    )
    db.add(instance)
    await db.flush()
    invite_friends(db, instance.id, body.invited_friends)
    await db.commit()

    logger.info(
        "create_instance: id=%s activity=%s invited=%d", instance.id, activity.id, len(body.invited_friends)
    )
    return await load_instance(db, instance.id)


# ─── Detail / update / delete ───

@router.get("/{instance_id}", response_model=InstanceOut)
async def get_instance(
    instance_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    instance = await load_instance(db, instance_id)
    if instance is None or instance.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Instance not found")
    return instance


@router.put("/{instance_id}", response_model=InstanceOut)
async def update_instance(
    instance_id: uuid.UUID,
    body: InstanceUpdate,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    instance = await _owned_instance(db, instance_id, current_user)
    fields_set = body.model_fields_set

    starts_at = body.starts_at if body.starts_at is not None else instance.starts_at
    ends_at = body.ends_at if "ends_at" in fields_set else instance.ends_at
    if ends_at is not None and ends_at < starts_at:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=END_BEFORE_START)

    instance.starts_at = starts_at
    instance.ends_at = ends_at
    if body.is_all_day is not None:
        instance.is_all_day = body.is_all_day
    if body.allow_external_guests is not None:
        instance.allow_external_guests = body.allow_external_guests
    if "location" in fields_set:
        instance.location = body.location or None
    if "notes" in fields_set:
        instance.notes = body.notes or None
    for name, value in _detail_values(body, only_set=True).items():
        setattr(instance, name, value)

    if body.friend_ids is not None:
        try:
            await check_friend_ownership(db, current_user.id, body.friend_ids)
        except ForeignFriendError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
        await db.execute(delete(Participation).where(Participation.instance_id == instance.id))
        invite_friends(db, instance.id, body.friend_ids)

    db.add(instance)
    await db.commit()
    return await load_instance(db, instance.id)


@router.delete("/{instance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_instance(
    instance_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    instance = await _owned_instance(db, instance_id, current_user)
    audit_svc.log(
        db,
        action="instance_deleted",
        entity_type="activity_instance",
        entity_id=instance.id,
        actor_id=current_user.id,
        actor_email=current_user.email,
        before={"title": instance.title, "starts_at": instance.starts_at},
    )
    await db.delete(instance)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─── RSVP removal (owner) ───

@router.delete("/{instance_id}/rsvp", summary="Remove an RSVP by friend or by RSVP id")
async def delete_rsvp(
    instance_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    friend_id: uuid.UUID | None = Query(default=None, alias="friendId"),
    rsvp_id: uuid.UUID | None = Query(default=None, alias="rsvpId"),
):
    if friend_id is None and rsvp_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Either friendId or rsvpId is required")

    owned = (
        await db.execute(
            select(ActivityInstance.id).where(
                ActivityInstance.id == instance_id, ActivityInstance.user_id == current_user.id
            )
        )
    ).first()
    if owned is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found or access denied")

    stmt = delete(PublicRSVP).where(PublicRSVP.instance_id == instance_id)
    if rsvp_id is not None:
        stmt = stmt.where(PublicRSVP.id == rsvp_id)
    else:
        stmt = stmt.where(PublicRSVP.friend_id == friend_id)
    result = await db.execute(stmt)
    await db.commit()

    return {"success": True, "message": "RSVP removed successfully", "deleted": result.rowcount}


# ─── WhatsApp share ───

@router.get("/{instance_id}/whatsapp", response_model=WhatsAppShare, summary="WhatsApp invitation text and link")
async def whatsapp_share(
    instance_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    instance = await load_instance(db, instance_id)
    if instance is None or instance.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Instance not found")
    message = whatsapp.build_message(instance, tz_name=current_user.timezone)
    return WhatsAppShare(message=message, url=whatsapp.share_url(message))
