"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from metabalance.config import settings
from metabalance.db import Database, get_session
from metabalance.main import app


# ---------------------------------------------------------------------------
# In-memory SQLite database (no real Postgres needed)
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def offline_settings(monkeypatch):
    """No external API keys and a fixed timezone for every test."""
    monkeypatch.setattr(settings, "llm_api_key", None)
    monkeypatch.setattr(settings, "spoonacular_api_key", None)
    monkeypatch.setattr(settings, "default_tz", "UTC")


@pytest.fixture()
async def database():
    db = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture()
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture()
def override_session(database):
    """Point the FastAPI session dependency at the in-memory database."""

    async def _override():
        async with database.session() as s:
            yield s

    app.dependency_overrides[get_session] = _override
    yield database
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def auth_headers(client) -> dict[str, str]:
    resp = await client.post(
        "/auth/register",
        json={"email": "alex@example.com", "password": "secret123", "name": "Alex"},
    )
    assert resp.status_code == 201
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
