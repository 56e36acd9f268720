"""Tests for activity CRUD and value tagging."""
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.main import app
from socialiser.models.activity import ActivityValue

OWNER_ID = uuid.UUID("f96955d0-752f-4e0c-b1dc-d26d8dd1460e")
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeUser:
    id = OWNER_ID
    email = "demo@example.com"
    name = "Demo User"
    role = "USER"
    is_active = True


def make_activity(owner_id=OWNER_ID, value_names=("Family Time",)):
    activity_id = uuid.uuid4()
    values = []
    for name in value_names:
        value = SimpleNamespace(
            id=uuid.uuid4(), user_id=owner_id, name=name, description=None, created_at=NOW, updated_at=NOW
        )
        values.append(SimpleNamespace(id=uuid.uuid4(), activity_id=activity_id, value_id=value.id, value=value))
    return SimpleNamespace(
        id=activity_id,
        user_id=owner_id,
        name="Board games",
        description="Bring snacks",
        created_at=NOW,
        updated_at=NOW,
        values=values,
    )


def make_mock_session(activity=None, owned_value_count=0, instance_count=0, rows=None):
    """One result mock serves the ownership count, the activity lookup and the list query."""
    result = MagicMock()
    result.scalar_one.side_effect = [owned_value_count, instance_count, instance_count]
    result.scalar_one_or_none.return_value = activity
    result.all.return_value = rows or []
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    session.add = MagicMock()
    session.expire_all = MagicMock()
    return session


async def _call(session, method, url, json=None):
    async def override_get_session():
        yield session

    async def override_get_current_user():
        return FakeUser()

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = override_get_current_user
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.request(method, url, json=json)
    finally:
        app.dependency_overrides.clear()


# ─── List ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_includes_values_and_instance_count():
    activity = make_activity()
    session = make_mock_session(rows=[(activity, 3)])
    response = await _call(session, "GET", "/api/v1/activities")

    assert response.status_code == 200
    [item] = response.json()
    assert item["name"] == "Board games"
    assert item["instanceCount"] == 3
    assert item["values"][0]["value"]["name"] == "Family Time"


# ─── Create ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_with_foreign_value_returns_403():
    session = make_mock_session(owned_value_count=1)
    response = await _call(
        session,
        "POST",
        "/api/v1/activities",
        json={"name": "Hike", "valueIds": [str(uuid.uuid4()), str(uuid.uuid4())]},
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Some values do not belong to the authenticated user"
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_create_links_each_value_once():
    value_id = uuid.uuid4()
    session = make_mock_session(activity=make_activity(), owned_value_count=1)

    async def fake_flush():
        session.add.call_args_list[0].args[0].id = uuid.uuid4()

    session.flush = AsyncMock(side_effect=fake_flush)
    response = await _call(
        session, "POST", "/api/v1/activities", json={"name": " Hike ", "valueIds": [str(value_id), str(value_id)]}
    )

    assert response.status_code == 201
    assert response.json()["instanceCount"] == 0
    created = session.add.call_args_list[0].args[0]
    assert created.name == "Hike"
    links = [c.args[0] for c in session.add.call_args_list if isinstance(c.args[0], ActivityValue)]
    assert [link.value_id for link in links] == [value_id]
    session.commit.assert_awaited_once()


# ─── Detail / update / delete ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_get_foreign_activity_returns_404():
    activity = make_activity(owner_id=uuid.uuid4())
    response = await _call(make_mock_session(activity), "GET", f"/api/v1/activities/{activity.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_replaces_value_links():
    activity = make_activity()
    new_value = uuid.uuid4()
    session = make_mock_session(activity, owned_value_count=1, instance_count=2)
    response = await _call(
        session, "PUT", f"/api/v1/activities/{activity.id}", json={"valueIds": [str(new_value)]}
    )

    assert response.status_code == 200
    assert response.json()["instanceCount"] == 2
    links = [c.args[0] for c in session.add.call_args_list if isinstance(c.args[0], ActivityValue)]
    assert [link.value_id for link in links] == [new_value]
    # load, ownership count, link delete, reload, instance count
    assert session.execute.await_count == 5


@pytest.mark.asyncio
async def test_update_foreign_activity_returns_403():
    activity = make_activity(owner_id=uuid.uuid4())
    response = await _call(make_mock_session(activity), "PUT", f"/api/v1/activities/{activity.id}", json={"name": "x"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_activity_audits_and_deletes():
    activity = make_activity()
    session = make_mock_session(activity)
    response = await _call(session, "DELETE", f"/api/v1/activities/{activity.id}")

    assert response.status_code == 204
    session.delete.assert_awaited_once_with(activity)
    assert session.add.call_args.args[0].action == "activity_deleted"
