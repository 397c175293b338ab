"""Shared Redis client for the rate-limit counters.

Redis is optional. The lifespan calls init_redis(); when that fails the
client stays unset, get_redis() raises RuntimeError, and both the rate
limiter and /health treat Redis as disabled.
"""

from typing import Optional

import redis.asyncio as aioredis

from tasksapi.config import settings

_redis: Optional[aioredis.Redis] = None


async def init_redis(url: Optional[str] = None) -> aioredis.Redis:
    """Connect, ping, and only then publish the client."""
    global _redis
    client = aioredis.from_url(url or settings.redis_url, decode_responses=True)
    await client.ping()
    _redis = client
    return client


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    if _redis is None:
        raise RuntimeError("Redis is not configured")
    return _redis
