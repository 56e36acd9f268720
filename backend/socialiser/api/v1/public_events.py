"""Unauthenticated event page and RSVP endpoints, rate limited per client address."""
import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialiser.core.config import settings
from socialiser.core.limiter import limiter
from socialiser.db.session import get_session
from socialiser.models.instance import ActivityInstance, Participation, ParticipationStatus, PublicRSVP
from socialiser.schemas.public_event import (
    PublicEventOut,
    PublicRSVPCreate,
    PublicRSVPOut,
    RSVPSubmitted,
    public_event_view,
)
from socialiser.services.instances import load_instance

logger = logging.getLogger(__name__)

router = APIRouter()


def _blank(value: str | None) -> bool:
    return not (value and value.strip())


# ─── Event page ───

@router.get("/{instance_id}", response_model=PublicEventOut, summary="Public view of an event")
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def get_public_event(
    request: Request,
    instance_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
):
    instance = await load_instance(db, instance_id)
    if instance is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return public_event_view(instance)


# ─── RSVPs ───

@router.post("/{instance_id}/rsvp", response_model=RSVPSubmitted, summary="Submit an RSVP")
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def submit_rsvp(
    request: Request,
    instance_id: uuid.UUID,
    body: PublicRSVPCreate,
    db: Annotated[AsyncSession, Depends(get_session)],
):
    if _blank(body.name) or (_blank(body.email) and _blank(body.phone)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and either email or phone are required",
        )

    instance = (
        await db.execute(select(ActivityInstance).where(ActivityInstance.id == instance_id))
    ).scalar_one_or_none()
    if instance is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")

    participation: Participation | None = None
    if body.invite_token:
        participation = (
            await db.execute(
                select(Participation).where(
                    Participation.invite_token == body.invite_token,
                    Participation.instance_id == instance.id,
                )
            )
        ).scalar_one_or_none()
        if participation is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found")
    elif not instance.allow_external_guests:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This event is invite-only",
        )

    if instance.capacity:
        current = (
            await db.execute(select(func.count(PublicRSVP.id)).where(PublicRSVP.instance_id == instance.id))
        ).scalar_one()
        if current >= instance.capacity:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event is at capacity")

    rsvp = PublicRSVP(
        instance_id=instance.id,
        friend_id=participation.friend_id if participation else None,
        name=body.name.strip(),
        email=None if _blank(body.email) else body.email.strip(),
        phone=None if _blank(body.phone) else body.phone.strip(),
        message=body.message or None,
    )
    db.add(rsvp)
    if participation is not None:
        participation.status = ParticipationStatus.CONFIRMED.value
        db.add(participation)
    await db.commit()
    await db.refresh(rsvp)

    logger.info("submit_rsvp: instance=%s rsvp=%s invited=%s", instance.id, rsvp.id, participation is not None)
    return RSVPSubmitted(message="RSVP submitted successfully", id=rsvp.id)


@router.get("/{instance_id}/rsvp", response_model=list[PublicRSVPOut], summary="List RSVPs, newest first")
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def list_rsvps(
    request: Request,
    instance_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_session)],
):
    result = await db.execute(
        select(PublicRSVP).where(PublicRSVP.instance_id == instance_id).order_by(PublicRSVP.created_at.desc())
    )
    return result.scalars().all()
