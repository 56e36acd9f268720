"""Tests for the public event page, public RSVPs and personal invite links."""
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from socialiser.core.limiter import limiter
from socialiser.db.session import get_session
from socialiser.main import app
from socialiser.models.instance import PublicRSVP

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
STARTS = datetime(2025, 3, 15, 19, 0, tzinfo=timezone.utc)


# ─── Fixtures ─────────────────────────────────────────────────────────────────

class FakeInstance(SimpleNamespace):
    @property
    def title(self):
        return self.custom_title or self.activity.name


def make_instance(**overrides):
    activity = SimpleNamespace(
        name="Board games",
        description="Bring snacks",
        values=[SimpleNamespace(value=SimpleNamespace(name="Fun"))],
    )
    friend = SimpleNamespace(id=uuid.uuid4(), name="Alice", email="alice@example.com", phone="07700 900000")
    fields = dict(
        id=uuid.uuid4(), user_id=uuid.uuid4(), activity=activity, starts_at=STARTS, ends_at=None,
        is_all_day=False, location="Town hall", allow_external_guests=True,
        participations=[SimpleNamespace(friend=friend, friend_id=friend.id)],
        custom_title=None, venue=None, address=None, city=None, state=None, zip_code=None,
        detailed_description=None, requirements=None, contact_info=None, venue_type=None,
        price_info=None, capacity=None,
    )
    fields.update(overrides)
    return FakeInstance(**fields)


def make_result(value=None, scalars=None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    result.scalars.return_value.all.return_value = list(scalars or [])
    return result


def make_mock_session(*results):
    """Each execute() call returns the next prepared result."""
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=list(results))
    session.add = MagicMock()

    async def fake_refresh(obj):
        obj.id = uuid.uuid4()

    session.refresh = AsyncMock(side_effect=fake_refresh)
    return session


async def _call(session, method, url, json=None):
    async def override_get_session():
        yield session

    limiter.reset()
    app.dependency_overrides[get_session] = override_get_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.request(method, url, json=json)
    finally:
        app.dependency_overrides.clear()


def rsvp_url(instance_id) -> str:
    return f"/api/v1/public-events/{instance_id}/rsvp"


# ─── Event page ───────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_public_event_hides_contact_details():
    instance = make_instance()
    response = await _call(make_mock_session(make_result(instance)), "GET", f"/api/v1/public-events/{instance.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Board games"
    assert data["activity"]["values"] == ["Fun"]
    assert data["participantCount"] == 1
    assert data["participantNames"] == ["Alice"]
    assert "alice@example.com" not in response.text
    assert "07700" not in response.text
    assert "userId" not in data


@pytest.mark.asyncio
async def test_public_event_missing_returns_404():
    response = await _call(make_mock_session(make_result(None)), "GET", f"/api/v1/public-events/{uuid.uuid4()}")
    assert response.status_code == 404


# ─── RSVP ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_rsvp_requires_name_and_contact():
    session = make_mock_session()
    response = await _call(session, "POST", rsvp_url(uuid.uuid4()), json={"name": "Zed"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Name and either email or phone are required"
    session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_rsvp_missing_event_returns_404():
    response = await _call(
        make_mock_session(make_result(None)), "POST", rsvp_url(uuid.uuid4()), json={"name": "Zed", "phone": "123"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_rsvp_invite_only_event_rejects_external_guest():
    instance = make_instance(allow_external_guests=False)
    session = make_mock_session(make_result(instance))
    response = await _call(session, "POST", rsvp_url(instance.id), json={"name": "Zed", "email": "z@x.com"})

    assert response.status_code == 403
    assert response.json()["detail"] == "This event is invite-only"
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_rsvp_unknown_invite_token_returns_404():
    instance = make_instance(allow_external_guests=False)
    session = make_mock_session(make_result(instance), make_result(None))
    response = await _call(
        session, "POST", rsvp_url(instance.id), json={"name": "Zed", "email": "z@x.com", "inviteToken": "nope"}
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Invite not found"


@pytest.mark.asyncio
async def test_rsvp_full_event_returns_400():
    instance = make_instance(capacity=2)
    session = make_mock_session(make_result(instance), make_result(2))
    response = await _call(session, "POST", rsvp_url(instance.id), json={"name": "Zed", "email": "z@x.com"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Event is at capacity"


@pytest.mark.asyncio
async def test_rsvp_external_guest_is_stored():
    instance = make_instance(capacity=5)
    session = make_mock_session(make_result(instance), make_result(1))
    response = await _call(
        session, "POST", rsvp_url(instance.id),
        json={"name": "  Zed ", "email": " ", "phone": " 123 ", "message": "Can't wait"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "RSVP submitted successfully"
    rsvp = session.add.call_args_list[0].args[0]
    assert isinstance(rsvp, PublicRSVP)
    assert rsvp.name == "Zed"
    assert rsvp.email is None
    assert rsvp.phone == "123"
    assert rsvp.friend_id is None
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_rsvp_with_invite_token_confirms_participation():
    instance = make_instance(allow_external_guests=False)
    participation = SimpleNamespace(friend_id=uuid.uuid4(), status="INVITED")
    session = make_mock_session(make_result(instance), make_result(participation))
    response = await _call(
        session, "POST", rsvp_url(instance.id), json={"name": "Alice", "email": "a@x.com", "inviteToken": "tok"}
    )

    assert response.status_code == 200
    assert participation.status == "CONFIRMED"
    rsvp = session.add.call_args_list[0].args[0]
    assert rsvp.friend_id == participation.friend_id


@pytest.mark.asyncio
async def test_list_rsvps():
    rsvp = SimpleNamespace(id=uuid.uuid4(), friend_id=None, name="Zed", message=None, created_at=NOW)
    response = await _call(make_mock_session(make_result(scalars=[rsvp])), "GET", rsvp_url(uuid.uuid4()))

    assert response.status_code == 200
    assert response.json()[0]["name"] == "Zed"


@pytest.mark.asyncio
async def test_public_endpoints_are_rate_limited():
    instance = make_instance()
    session = AsyncMock()
    session.execute = AsyncMock(return_value=make_result(instance))

    async def override_get_session():
        yield session

    limiter.reset()
    app.dependency_overrides[get_session] = override_get_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            statuses = [
                (await client.get(f"/api/v1/public-events/{instance.id}")).status_code for _ in range(31)
            ]
    finally:
        app.dependency_overrides.clear()
        limiter.reset()

    assert statuses[:30] == [200] * 30
    assert statuses[30] == 429


# ─── Invite links ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_invite_resolves_token():
    instance = make_instance()
    friend = instance.participations[0].friend
    participation = SimpleNamespace(
        id=uuid.uuid4(), status="INVITED", invite_token="tok", instance_id=instance.id, friend=friend
    )
    session = make_mock_session(
        make_result(participation), make_result(instance), make_result("Demo User"), make_result(scalars=[])
    )
    response = await _call(session, "GET", "/api/v1/invites/tok")

    assert response.status_code == 200
    data = response.json()
    assert data["ownerName"] == "Demo User"
    assert data["friend"] == {"id": str(friend.id), "name": "Alice"}
    assert data["instance"]["title"] == "Board games"
    assert "alice@example.com" not in response.text


@pytest.mark.asyncio
async def test_invite_unknown_token_returns_404():
    response = await _call(make_mock_session(make_result(None)), "GET", "/api/v1/invites/nope")
    assert response.status_code == 404
