"""Access log middleware — one structured line per request.

The auth guard runs inside the endpoint's context, so a user_id it binds
to contextvars never reaches this middleware. The guard also stores the
id on request.state, which is shared with us; that is where the access
line reads it from.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        response: Response = await call_next(request)

        fields = {}
        user_id = getattr(request.state, "user_id", None)
        if user_id is not None:
            fields["user_id"] = str(user_id)
        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            **fields,
        )
        return response
