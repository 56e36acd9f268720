"""Tests for activity instance scheduling, RSVP removal and WhatsApp sharing."""
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.main import app
from socialiser.models.instance import ActivityInstance, Participation

OWNER_ID = uuid.UUID("f96955d0-752f-4e0c-b1dc-d26d8dd1460e")
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
STARTS = datetime(2025, 3, 15, 19, 0, tzinfo=timezone.utc)


# ─── Fixtures ─────────────────────────────────────────────────────────────────

class FakeUser:
    id = OWNER_ID
    email = "demo@example.com"
    name = "Demo User"
    role = "USER"
    is_active = True
    timezone = "Europe/London"


class FakeInstance(SimpleNamespace):
    @property
    def title(self):
        return self.custom_title or self.activity.name


def make_instance(owner_id=OWNER_ID, **overrides):
    activity = SimpleNamespace(id=uuid.uuid4(), name="Board games", description="Bring snacks", values=[])
    fields = dict(
        id=uuid.uuid4(), user_id=owner_id, activity_id=activity.id, activity=activity,
        starts_at=STARTS, ends_at=None, is_all_day=False, location="Town hall", notes=None,
        allow_external_guests=True, created_at=NOW, updated_at=NOW, participations=[],
        custom_title=None, venue=None, address=None, city=None, state=None, zip_code=None,
        detailed_description=None, requirements=None, contact_info=None, venue_type=None,
        price_info=None, capacity=None,
    )
    fields.update(overrides)
    return FakeInstance(**fields)


def make_mock_session(lookups=(), owned_friend_count=0, first=None, rowcount=0):
    """lookups feeds scalar_one_or_none in call order (activity, then reloaded instance, ...)."""
    result = MagicMock()
    result.scalar_one_or_none.side_effect = list(lookups) + [None] * 5
    result.scalar_one.return_value = owned_friend_count
    result.first.return_value = first
    result.rowcount = rowcount
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    session.add = MagicMock()
    session.add_all = MagicMock()

    async def fake_flush():
        for call in session.add.call_args_list:
            obj = call.args[0]
            if isinstance(obj, ActivityInstance) and obj.id is None:
                obj.id = uuid.uuid4()

    session.flush = AsyncMock(side_effect=fake_flush)
    return session


async def _call(session, method, url, json=None, params=None):
    async def override_get_session():
        yield session

    async def override_get_current_user():
        return FakeUser()

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = override_get_current_user
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.request(method, url, json=json, params=params)
    finally:
        app.dependency_overrides.clear()


# ─── Create ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_end_before_start_returns_400():
    session = make_mock_session()
    response = await _call(
        session, "POST", "/api/v1/instances",
        json={"activityId": str(uuid.uuid4()), "datetime": "2025-03-15T19:00:00Z", "endDate": "2025-03-15T18:00:00Z"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "End date cannot be before start date"
    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_for_unowned_activity_returns_404():
    response = await _call(
        make_mock_session(lookups=[None]), "POST", "/api/v1/instances",
        json={"activityId": str(uuid.uuid4()), "datetime": "2025-03-15T19:00:00Z"},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Activity not found or access denied"


@pytest.mark.asyncio
async def test_create_with_foreign_friend_returns_403():
    activity = SimpleNamespace(id=uuid.uuid4())
    session = make_mock_session(lookups=[activity], owned_friend_count=0)
    response = await _call(
        session, "POST", "/api/v1/instances",
        json={"activityId": str(activity.id), "datetime": "2025-03-15T19:00:00Z", "invitedFriends": [str(uuid.uuid4())]},
    )

    assert response.status_code == 403
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_create_invites_each_friend_with_its_own_token():
    instance = make_instance()
    activity = SimpleNamespace(id=instance.activity_id)
    friend_a, friend_b = uuid.uuid4(), uuid.uuid4()
    session = make_mock_session(lookups=[activity, instance], owned_friend_count=2)

    response = await _call(
        session, "POST", "/api/v1/instances",
        json={
            "activityId": str(activity.id),
            "datetime": "2025-03-15T19:00:00",
            "invitedFriends": [str(friend_a), str(friend_b), str(friend_a)],
            "venueType": "outdoor",
            "capacity": 12,
        },
    )

    assert response.status_code == 201
    assert response.json()["datetime"].startswith("2025-03-15T19:00:00")

    created = session.add.call_args_list[0].args[0]
    assert isinstance(created, ActivityInstance)
    assert created.starts_at == STARTS
    assert created.venue_type == "outdoor"
    assert created.capacity == 12

    participations = session.add_all.call_args.args[0]
    assert all(isinstance(p, Participation) for p in participations)
    assert [p.friend_id for p in participations] == [friend_a, friend_b]
    assert {p.status for p in participations} == {"INVITED"}
    assert len({p.invite_token for p in participations}) == 2
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_rejects_non_positive_capacity():
    response = await _call(
        make_mock_session(), "POST", "/api/v1/instances",
        json={"activityId": str(uuid.uuid4()), "datetime": "2025-03-15T19:00:00Z", "capacity": 0},
    )
    assert response.status_code == 422


# ─── Detail / update / delete ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_get_foreign_instance_returns_404():
    instance = make_instance(owner_id=uuid.uuid4())
    response = await _call(make_mock_session(lookups=[instance]), "GET", f"/api/v1/instances/{instance.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_end_before_existing_start_returns_400():
    instance = make_instance()
    response = await _call(
        make_mock_session(lookups=[instance]), "PUT", f"/api/v1/instances/{instance.id}",
        json={"endDate": "2025-03-15T18:00:00Z"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_replaces_participations():
    instance = make_instance()
    friend_id = uuid.uuid4()
    session = make_mock_session(lookups=[instance, instance], owned_friend_count=1)
    response = await _call(
        session, "PUT", f"/api/v1/instances/{instance.id}",
        json={"friendIds": [str(friend_id)], "notes": "", "customTitle": "Games night"},
    )

    assert response.status_code == 200
    assert response.json()["customTitle"] == "Games night"
    assert instance.notes is None
    [participation] = session.add_all.call_args.args[0]
    assert participation.friend_id == friend_id


@pytest.mark.asyncio
async def test_update_foreign_instance_returns_403():
    instance = make_instance(owner_id=uuid.uuid4())
    response = await _call(
        make_mock_session(lookups=[instance]), "PUT", f"/api/v1/instances/{instance.id}", json={"notes": "x"}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_instance_audits():
    instance = make_instance()
    session = make_mock_session(lookups=[instance])
    response = await _call(session, "DELETE", f"/api/v1/instances/{instance.id}")

    assert response.status_code == 204
    assert session.add.call_args.args[0].action == "instance_deleted"
    session.delete.assert_awaited_once_with(instance)


# ─── RSVP removal ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_delete_rsvp_requires_friend_or_rsvp_id():
    response = await _call(make_mock_session(), "DELETE", f"/api/v1/instances/{uuid.uuid4()}/rsvp")
    assert response.status_code == 400
    assert response.json()["detail"] == "Either friendId or rsvpId is required"


@pytest.mark.asyncio
async def test_delete_rsvp_on_unowned_instance_returns_404():
    response = await _call(
        make_mock_session(first=None), "DELETE", f"/api/v1/instances/{uuid.uuid4()}/rsvp",
        params={"rsvpId": str(uuid.uuid4())},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_rsvp_by_friend():
    instance_id = uuid.uuid4()
    session = make_mock_session(first=(instance_id,), rowcount=1)
    response = await _call(
        session, "DELETE", f"/api/v1/instances/{instance_id}/rsvp", params={"friendId": str(uuid.uuid4())}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "RSVP removed successfully", "deleted": 1}
    session.commit.assert_awaited_once()


# ─── WhatsApp ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_whatsapp_share_uses_owner_timezone():
    instance = make_instance()
    response = await _call(make_mock_session(lookups=[instance]), "GET", f"/api/v1/instances/{instance.id}/whatsapp")

    assert response.status_code == 200
    data = response.json()
    assert "Saturday, March 15, 2025 at 7:00 PM" in data["message"]
    assert data["url"].startswith("https://wa.me/?text=")
