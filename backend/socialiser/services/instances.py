"""Shared loading and participation helpers for activity instances."""
import uuid
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from socialiser.core.security import create_invite_token
from socialiser.models.activity import Activity, ActivityValue
from socialiser.models.friend import Friend
from socialiser.models.instance import ActivityInstance, Participation, ParticipationStatus


class ForeignFriendError(ValueError):
    """One or more friend ids do not belong to the instance owner."""


def instance_load_options():
    """Eager loads needed to render an instance with activity, values and participants."""
    return (
        selectinload(ActivityInstance.activity)
        .selectinload(Activity.values)
        .selectinload(ActivityValue.value),
        selectinload(ActivityInstance.participations).selectinload(Participation.friend),
    )


async def load_instance(db: AsyncSession, instance_id: uuid.UUID) -> ActivityInstance | None:
    stmt = (
        select(ActivityInstance)
        .where(ActivityInstance.id == instance_id)
        .options(*instance_load_options())
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def check_friend_ownership(db: AsyncSession, owner_id: uuid.UUID, friend_ids: Iterable[uuid.UUID]) -> None:
    wanted = set(friend_ids)
    if not wanted:
        return
    result = await db.execute(
        select(func.count(Friend.id)).where(Friend.id.in_(wanted), Friend.user_id == owner_id)
    )
    if result.scalar_one() != len(wanted):
        raise ForeignFriendError("Some friends do not belong to the authenticated user")


def invite_friends(db: AsyncSession, instance_id: uuid.UUID, friend_ids: Iterable[uuid.UUID]) -> list[Participation]:
    """Stage one INVITED participation, with a fresh invite token, per distinct friend."""
    participations = [
        Participation(
            instance_id=instance_id,
            friend_id=friend_id,
            status=ParticipationStatus.INVITED.value,
            invite_token=create_invite_token(),
        )
        for friend_id in dict.fromkeys(friend_ids)
    ]
    db.add_all(participations)
    return participations
