"""Session token carriers.

Two carriers exist: an httpOnly cookie named "token" and the
Authorization: Bearer header. Which one login *emits* is chosen once at
startup (settings.token_transport). Which ones a request may *present*
is fixed, and the order matters:

    1. cookie "token"
    2. Authorization header, exactly "<scheme> <token>" with scheme
       equal to "Bearer" ignoring case

First match wins. No candidate at all → NoTokenProvidedError; whether
the candidate is any good is TokenService.verify's business.
"""

from collections.abc import Mapping
from typing import Optional

from starlette.responses import Response

from tasksapi.config import CookieConfig
from tasksapi.errors import NoTokenProvidedError


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an Authorization header, or None."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) != 2:
        return None
    scheme, token = parts
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def extract_credential(
    cookies: Mapping[str, str],
    authorization: Optional[str],
    cookie_name: str = "token",
) -> str:
    """Pick the raw session token out of a request's carriers."""
    token = cookies.get(cookie_name)
    if token:
        return token
    token = parse_bearer(authorization)
    if token:
        return token
    raise NoTokenProvidedError()


class SessionTransport:
    """How a freshly issued token travels back to the client."""

    def __init__(self, mode: str, cookie: CookieConfig):
        if mode not in ("cookie", "bearer"):
            raise ValueError(f"Unknown token transport: {mode!r}")
        self.mode = mode
        self.cookie = cookie

    def deliver(self, response: Response, token: str) -> dict:
        """Attach the token to the response.

        Returns extra body fields: {"token": ...} in bearer mode, nothing
        in cookie mode (the token must not be readable from JS there).
        """
        if self.mode == "bearer":
            return {"token": token}
        response.set_cookie(
            self.cookie.name,
            token,
            max_age=self.cookie.max_age_seconds,
            path=self.cookie.path,
            secure=self.cookie.secure,
            httponly=True,
            samesite=self.cookie.samesite,
        )
        return {}

    def clear(self, response: Response) -> None:
        """Expire the session cookie. The token itself stays valid until exp."""
        response.delete_cookie(
            self.cookie.name,
            path=self.cookie.path,
            secure=self.cookie.secure,
            httponly=True,
            samesite=self.cookie.samesite,
        )
