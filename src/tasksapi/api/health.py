"""Health check endpoint.

GET /health answers "ok" while the database is reachable and "degraded"
otherwise. Redis is reported too, but it only backs rate limiting, so
it never degrades the status. Every probe is bounded by CHECK_TIMEOUT.
"""

import asyncio

from fastapi import APIRouter
from sqlalchemy import text

from tasksapi import __version__
from tasksapi.cache.redis import get_redis
from tasksapi.db import engine as db_engine

router = APIRouter()

CHECK_TIMEOUT = 2.0


async def _check_database() -> str:
    async with db_engine.engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    return "ok"


async def _check_redis() -> str:
    try:
        client = get_redis()
    except RuntimeError:
        return "disabled"
    await client.ping()
    return "ok"


async def _probe(check) -> str:
    try:
        return await asyncio.wait_for(check(), timeout=CHECK_TIMEOUT)
    except asyncio.TimeoutError:
        return "error: timed out"
    except Exception as e:
        return f"error: {e}"


@router.get("/health")
async def health_check():
    """Report server status and dependency connectivity."""
    checks = {
        "database": await _probe(_check_database),
        "redis": await _probe(_check_redis),
    }
    status = "ok" if checks["database"] == "ok" else "degraded"
    return {"status": status, "version": __version__, "checks": checks}
