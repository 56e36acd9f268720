from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialiser.core.config import settings
from socialiser.core.limiter import limiter
from socialiser.db.session import get_session
from socialiser.models.instance import Participation, PublicRSVP
from socialiser.models.user import User
from socialiser.schemas.friend import FriendStub
from socialiser.schemas.public_event import InviteOut, PublicRSVPOut, public_event_view
from socialiser.services.instances import load_instance

router = APIRouter()


@router.get("/{token}", response_model=InviteOut, summary="Resolve a personal invite link")
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
async def get_invite(
    request: Request,
    token: str,
    db: Annotated[AsyncSession, Depends(get_session)],
):
    participation = (
        await db.execute(
            select(Participation)
            .where(Participation.invite_token == token)
            .options(selectinload(Participation.friend))
        )
    ).scalar_one_or_none()
    if participation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found")

    instance = await load_instance(db, participation.instance_id)
    owner_name = (
        await db.execute(select(User.name).where(User.id == instance.user_id))
    ).scalar_one_or_none()
    rsvps = (
        await db.execute(
            select(PublicRSVP)
            .where(PublicRSVP.instance_id == instance.id)
            .order_by(PublicRSVP.created_at.desc())
        )
    ).scalars().all()

    return InviteOut(
        id=participation.id,
        status=participation.status,
        invite_token=participation.invite_token,
        owner_name=owner_name or "",
        friend=FriendStub.model_validate(participation.friend),
        instance=public_event_view(instance),
        rsvps=[PublicRSVPOut.model_validate(r) for r in rsvps],
    )
