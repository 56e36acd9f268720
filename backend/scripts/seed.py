"""Seed script: creates a demo user with values, friends, activities and one scheduled instance.

Idempotent: checks for existing records before inserting.
Run from backend/: python scripts/seed.py
"""
import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from socialiser.core.config import settings
from socialiser.core.security import hash_password
from socialiser.models import Activity, ActivityInstance, ActivityValue, CoreValue, Friend, User
from socialiser.services.instances import invite_friends

NOW = datetime.now(timezone.utc)

VALUES = [
    ("Family Time", "Quality time with the people closest to me"),
    ("Adventure", "Trying new things outdoors"),
    ("Learning", "Growing skills and curiosity"),
]

FRIENDS = [
    ("Alice Johnson", "alice@example.com", "Work"),
    ("Bob Smith", "bob@example.com", "College"),
    ("Carol Davis", None, "Family"),
]

ACTIVITIES = [
    ("Board Game Night", "Strategy games and snacks", ["Family Time", "Learning"]),
    ("Hiking", "Half-day trail walk", ["Adventure"]),
]


# ─── Upsert helpers ───────────────────────────────────────────────────────────

async def _upsert_user(db: AsyncSession, email: str, name: str, role: str) -> User:
    user = (await db.execute(select(User).where(User.email == email))).scalars().first()
    if user:
        print(f"  [skip] User {email}")
        return user
    user = User(
        email=email, name=name,
        password_hash=hash_password("changeme123"),
        role=role, is_active=True, preferences={},
    )
    db.add(user)
    await db.flush()
    print(f"  [new]  User {email} ({role})")
    return user


async def _upsert_value(db: AsyncSession, owner: User, name: str, description: str) -> CoreValue:
    value = (
        await db.execute(select(CoreValue).where(CoreValue.user_id == owner.id, CoreValue.name == name))
    ).scalars().first()
    if value:
        print(f"  [skip] Value {name}")
        return value
    value = CoreValue(user_id=owner.id, name=name, description=description)
    db.add(value)
    await db.flush()
    print(f"  [new]  Value {name}")
    return value


async def _upsert_friend(db: AsyncSession, owner: User, name: str, email: str | None, group: str) -> Friend:
    friend = (
        await db.execute(select(Friend).where(Friend.user_id == owner.id, Friend.name == name))
    ).scalars().first()
    if friend:
        print(f"  [skip] Friend {name}")
        return friend
    friend = Friend(user_id=owner.id, name=name, email=email, group=group)
    db.add(friend)
    await db.flush()
    print(f"  [new]  Friend {name}")
    return friend


async def _upsert_activity(
    db: AsyncSession, owner: User, name: str, description: str, values: list[CoreValue]
) -> tuple[Activity, bool]:
    activity = (
        await db.execute(select(Activity).where(Activity.user_id == owner.id, Activity.name == name))
    ).scalars().first()
    if activity:
        print(f"  [skip] Activity {name}")
        return activity, False
    activity = Activity(user_id=owner.id, name=name, description=description)
    db.add(activity)
    await db.flush()
    for value in values:
        db.add(ActivityValue(activity_id=activity.id, value_id=value.id))
    print(f"  [new]  Activity {name}")
    return activity, True


# ─── Main ─────────────────────────────────────────────────────────────────────

async def seed() -> None:
    engine = create_async_engine(settings.DATABASE_URL)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async with session_factory() as db:
        print("Users")
        admin = await _upsert_user(db, "admin@example.com", "Admin User", "ADMIN")
        demo = await _upsert_user(db, "demo@example.com", "Demo User", "USER")

        print("Values")
        values = {name: await _upsert_value(db, demo, name, desc) for name, desc in VALUES}

        print("Friends")
        friends = [await _upsert_friend(db, demo, *row) for row in FRIENDS]

        print("Activities")
        for name, description, value_names in ACTIVITIES:
            activity, created = await _upsert_activity(
                db, demo, name, description, [values[v] for v in value_names]
            )
            if not created:
                continue
            instance = ActivityInstance(
                user_id=demo.id,
                activity_id=activity.id,
                starts_at=(NOW + timedelta(days=7)).replace(hour=18, minute=0, second=0, microsecond=0),
                location="Community Center",
                allow_external_guests=True,
            )
            db.add(instance)
            await db.flush()
            invite_friends(db, instance.id, [f.id for f in friends])
            print(f"  [new]  Instance of {name} on {instance.starts_at:%Y-%m-%d}")

        await db.commit()
        print(f"Done. Log in as {admin.email} or {demo.email} with password changeme123")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
