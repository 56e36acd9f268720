"""Tests for POST /api/v1/friends/import."""
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from socialiser.core.deps import get_current_user
from socialiser.db.session import get_session
from socialiser.main import app

URL = "/api/v1/friends/import"


# ─── Fixtures ─────────────────────────────────────────────────────────────────

class FakeUser:
    def __init__(self):
        self.id = uuid.UUID("f96955d0-752f-4e0c-b1dc-d26d8dd1460e")
        self.email = "demo@example.com"
        self.name = "Demo User"
        self.role = "USER"
        self.is_active = True


def make_mock_session(existing_names: list[str] | None = None, insert_error: Exception | None = None):
    """Session answering the existing-names SELECT and the bulk INSERT."""
    session = AsyncMock()
    session.add = MagicMock()
    session.inserted = []

    async def execute(stmt, params=None):
        result = MagicMock()
        if params is None:
            result.scalars.return_value.all.return_value = list(existing_names or [])
            return result
        if insert_error is not None:
            raise insert_error
        session.inserted.extend(params)
        result.scalars.return_value.all.return_value = [uuid.uuid4() for _ in params]
        return result

    session.execute = execute
    return session


async def _post(session, files=None):
    async def override_get_session():
        yield session

    async def override_get_current_user():
        return FakeUser()

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = override_get_current_user
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.post(URL, files=files)
    finally:
        app.dependency_overrides.clear()


# ─── Tests ────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_import_returns_camelcase_outcome_and_commits():
    session = make_mock_session(existing_names=["Carol"])
    csv_bytes = b"Name,Email,Group\nAl,,\n,,\nAl,,\nBo,bo@x.com,\ncarol,,Family\n"

    response = await _post(session, files={"file": ("friends.csv", csv_bytes, "text/csv")})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["totalRows"] == 5
    assert data["successfulImports"] == 2
    assert data["errors"] == [
        {"row": 2, "data": {"name": "", "email": "", "group": ""}, "error": "Name is required and cannot be empty"}
    ]
    assert data["duplicates"] == [
        {"row": 3, "name": "Al", "reason": "Duplicate name within import file"},
        {"row": 5, "name": "carol", "reason": "Friend with this name already exists"},
    ]
    assert data["importedFriends"] == [
        {"name": "Al", "email": None, "group": None},
        {"name": "Bo", "email": "bo@x.com", "group": None},
    ]
    session.commit.assert_awaited_once()
    audit_entry = session.add.call_args.args[0]
    assert audit_entry.action == "friends_imported"


@pytest.mark.asyncio
async def test_import_without_file_returns_400():
    response = await _post(make_mock_session())
    assert response.status_code == 400
    assert response.json()["detail"] == "No file provided"


@pytest.mark.asyncio
async def test_import_rejects_non_csv_extension():
    response = await _post(make_mock_session(), files={"file": ("friends.txt", b"name\nAl\n", "text/plain")})
    assert response.status_code == 400
    assert response.json()["detail"] == "Only CSV files are allowed"


@pytest.mark.asyncio
async def test_import_accepts_uppercase_extension():
    response = await _post(make_mock_session(), files={"file": ("FRIENDS.CSV", b"name\nAl\n", "text/csv")})
    assert response.status_code == 200
    assert response.json()["successfulImports"] == 1


@pytest.mark.asyncio
async def test_import_rejects_oversized_file():
    big = b"name\n" + b"x" * (2 * 1024 * 1024)
    response = await _post(make_mock_session(), files={"file": ("friends.csv", big, "text/csv")})
    assert response.status_code == 400
    assert response.json()["detail"] == "File size must be less than 2MB"


@pytest.mark.asyncio
async def test_import_structural_error_returns_details():
    csv_bytes = b"name,email\nAl,a@x.com,extra\n"
    response = await _post(make_mock_session(), files={"file": ("friends.csv", csv_bytes, "text/csv")})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "CSV parsing failed"
    assert len(body["details"]) == 1


@pytest.mark.asyncio
async def test_import_header_only_file_returns_400():
    session = make_mock_session()
    response = await _post(session, files={"file": ("friends.csv", b"name,email,group\n", "text/csv")})

    assert response.status_code == 400
    assert response.json()["detail"] == "CSV file is empty or contains no valid data"
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_import_store_failure_returns_500_and_rolls_back():
    session = make_mock_session(insert_error=OperationalError("INSERT", {}, Exception("db down")))
    response = await _post(session, files={"file": ("friends.csv", b"name\nAl\n", "text/csv")})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to import CSV file"
    session.rollback.assert_awaited()
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_import_requires_authentication():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(URL, files={"file": ("friends.csv", b"name\nAl\n", "text/csv")})
    assert response.status_code == 401
