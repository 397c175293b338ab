"""Health endpoint tests."""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from tasksapi import __version__
from tasksapi.db import engine as db_engine


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return status, version and per-dependency checks."""
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["version"] == __version__
    assert data["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_health_without_redis_is_still_ok(client):
    """Redis only backs rate limiting; its absence doesn't degrade health."""
    data = (await client.get("/health")).json()
    assert data["checks"]["redis"] == "disabled"
    assert data["status"] == "ok"


@pytest.mark.asyncio
async def test_health_degraded_when_database_down(client, monkeypatch, tmp_path):
    broken = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}"
    )
    monkeypatch.setattr(db_engine, "engine", broken)

    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["checks"]["database"].startswith("error")
    await broken.dispose()


@pytest.mark.asyncio
async def test_health_needs_no_auth(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
