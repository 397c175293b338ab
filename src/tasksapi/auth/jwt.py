"""Session token issuance and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries exactly one identity claim, userId, plus iat/exp. Nothing is
stored server-side, so there is nothing to revoke: logging out only
drops the cookie, and a copied token keeps working until it expires.

Verification failures all collapse into InvalidTokenError; a caller
cannot tell an expired token from a forged one.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from tasksapi.config import TokenConfig
from tasksapi.errors import InvalidTokenError

USER_ID_CLAIM = "userId"


class TokenService:
    """Issue and verify signed session tokens.

    Configured once at startup with an explicit TokenConfig; it never
    looks at the environment itself.
    """

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue(self, user_id: str, now: Optional[datetime] = None) -> str:
        """Create a token for user_id that expires config.lifetime_seconds from now."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            USER_ID_CLAIM: str(user_id),
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.config.lifetime_seconds),
        }
        return jwt.encode(
            payload, self.config.secret, algorithm=self.config.algorithm
        )

    def verify(self, token: str) -> str:
        """Verify a raw token and return its user id.

        Raises InvalidTokenError on bad signature, bad format, expiry,
        or a missing userId claim.
        """
        try:
            payload = jwt.decode(
                token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.InvalidTokenError as e:
            # ExpiredSignatureError is a subclass; same outcome on purpose
            raise InvalidTokenError() from e

        user_id = payload.get(USER_ID_CLAIM)
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError()
        return user_id
