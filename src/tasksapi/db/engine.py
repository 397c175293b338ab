"""Async engine, session factory and the get_db dependency.

One module-level engine per process, built from TASKSAPI_DATABASE_URL.
Handlers never open sessions themselves; they declare
`db: AsyncSession = Depends(get_db)` and get one session per request.

SQLite (used by the test suite) ignores foreign keys unless told
otherwise, so build_engine turns them on for every new connection. That
keeps ON DELETE CASCADE from users to tasks working the same way it does
on Postgres.
"""

from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tasksapi.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an engine for `database_url`.

    Extra kwargs go straight to create_async_engine (tests pass a
    StaticPool). Pool sizing defaults only apply to server databases.
    """
    is_sqlite = database_url.startswith("sqlite")
    if not is_sqlite:
        kwargs.setdefault("pool_size", 5)
        kwargs.setdefault("max_overflow", 15)
        kwargs.setdefault("pool_pre_ping", True)

    new_engine = create_async_engine(database_url, echo=echo, **kwargs)
    if is_sqlite:
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with async_session_factory() as session:
        yield session
