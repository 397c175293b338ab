"""Security headers middleware.

Applies a fixed header set to every response, errors included:

    X-Content-Type-Options             nosniff
    X-Frame-Options                    DENY
    Referrer-Policy                    no-referrer
    Cross-Origin-Opener-Policy         same-origin
    X-DNS-Prefetch-Control             off
    X-Permitted-Cross-Domain-Policies  none

Strict-Transport-Security is only sent over HTTPS. API responses also
get Cache-Control: no-store, since they carry per-user data. A header a
handler already set is left alone.

No Content-Security-Policy: the Swagger UI at /api-docs loads its
assets from a CDN.
"""

from collections.abc import Mapping
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
    "X-Permitted-Cross-Domain-Policies": "none",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains"
NO_STORE_PREFIX = "/api/"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, headers: Optional[Mapping[str, str]] = None):
        super().__init__(app)
        self.headers = dict(SECURITY_HEADERS if headers is None else headers)

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        if request.url.path.startswith(NO_STORE_PREFIX):
            response.headers.setdefault("Cache-Control", "no-store")
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        return response
