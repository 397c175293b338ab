"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI without a server DB:

1. Environment variables are set before tasksapi is imported, because
   `tasksapi.config.settings` is built at import time.
2. Each test gets its own sqlite+aiosqlite in-memory engine from the
   production build_engine (foreign keys on). StaticPool keeps a single
   connection alive, so every session sees the same DB.
3. get_db is overridden to hand out sessions from that engine, one per
   request, exactly like production does.

The auth pipeline is NOT mocked: tests register, log in and send the
real token. `client` runs in bearer mode (token in the login body) so
several users can share one HTTP client; `cookie_client` keeps the
default cookie mode and lets httpx's cookie jar carry the session.
"""

import os

os.environ.setdefault("TASKSAPI_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("TASKSAPI_ENVIRONMENT", "test")
os.environ.setdefault("TASKSAPI_RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TASKSAPI_JWT_SECRET", "test-secret-not-for-production")

import uuid  # noqa: E402
from dataclasses import dataclass  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tasksapi.auth.dependencies import get_session_transport  # noqa: E402
from tasksapi.auth.transport import SessionTransport  # noqa: E402
from tasksapi.config import settings  # noqa: E402
from tasksapi.db.engine import build_engine, get_db  # noqa: E402
from tasksapi.db.models import Base  # noqa: E402
from tasksapi.main import app  # noqa: E402

DEFAULT_PASSWORD = "password123"


@pytest_asyncio.fixture()
async def session_factory():
    """Per-test in-memory database with the full schema."""
    engine = build_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for tests that drive repositories/services directly."""
    async with session_factory() as session:
        yield session


def _override_get_db(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    return override_get_db


def _transport(mode: str):
    def override_get_session_transport():
        return SessionTransport(mode, settings.cookie_config())

    return override_get_session_transport


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client in bearer mode: login returns the token in the body."""
    app.dependency_overrides[get_db] = _override_get_db(session_factory)
    app.dependency_overrides[get_session_transport] = _transport("bearer")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def cookie_client(session_factory):
    """HTTP client in cookie mode: login sets the httpOnly "token" cookie."""
    app.dependency_overrides[get_db] = _override_get_db(session_factory)
    app.dependency_overrides[get_session_transport] = _transport("cookie")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ═══════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════


@dataclass
class AuthedUser:
    id: str
    name: str
    email: str
    password: str
    token: str

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def make_user(client):
    """Factory: register + login through the API, return an AuthedUser."""

    async def _make(
        name: str = "Test User",
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> AuthedUser:
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/users/register",
            json={"name": name, "email": email, "password": password},
        )
        assert r.status_code == 201, r.text

        r = await client.post(
            "/api/users/login", json={"email": email, "password": password}
        )
        assert r.status_code == 200, r.text
        body = r.json()
        return AuthedUser(
            id=body["user"]["id"],
            name=name,
            email=email,
            password=password,
            token=body["token"],
        )

    return _make


@pytest_asyncio.fixture()
async def alice(make_user):
    return await make_user(name="Alice", email="alice@example.com")


@pytest_asyncio.fixture()
async def bob(make_user):
    return await make_user(name="Bob", email="bob@example.com")
