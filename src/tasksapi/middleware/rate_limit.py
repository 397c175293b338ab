"""Rate limiting middleware: a Redis fixed window per client per minute.

Learn: Each IP gets a counter key like "tasksapi:rl:{ip}:{bucket}:{window}".
INCR creates it, the first hit sets a TTL, and the next window simply
uses a new key. A blocked client is told how many seconds remain in the
current window (Retry-After).
Register and login get a stricter limit (10/min) to slow down
credential stuffing.

Skips rate limiting if Redis is unavailable (e.g., in tests) or when
disabled through settings.
"""

import time

import structlog
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from tasksapi.cache.redis import get_redis

logger = structlog.get_logger()

AUTH_PATHS = ("/api/users/login", "/api/users/register")
WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per minute."""

    def __init__(
        self,
        app,
        default_rpm: int = 100,
        auth_rpm: int = 10,
        enabled: bool = True,
    ):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.enabled:
            return await call_next(request)

        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_auth = request.url.path.startswith(AUTH_PATHS)
        rpm = self.auth_rpm if is_auth else self.default_rpm

        now = int(time.time())
        window, elapsed = divmod(now, WINDOW_SECONDS)
        bucket = "auth" if is_auth else "api"
        key = f"tasksapi:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, WINDOW_SECONDS * 2)
        except RedisError as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.warning("rate_limit.exceeded", client_ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content={"message": "Too many requests, please try again later."},
                headers={"Retry-After": str(WINDOW_SECONDS - elapsed)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
