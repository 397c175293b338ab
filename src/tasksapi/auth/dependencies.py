"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers (and at router
level) to resolve the caller's identity before anything else runs.
FastAPI resolves router-level dependencies first and in declaration
order, so a request without a valid session never reaches a handler,
a service, or the database.

    request → extract_credential (cookie, then Bearer)
            → TokenService.verify
            → CurrentIdentity bound to request.state and the log context
"""

import uuid
from functools import lru_cache

import structlog
from fastapi import Depends, Request

from tasksapi.auth.jwt import TokenService
from tasksapi.auth.transport import SessionTransport, extract_credential
from tasksapi.config import settings
from tasksapi.errors import InvalidTokenError


class CurrentIdentity:
    """The authenticated caller. Tokens carry no roles or scopes, just a user id."""

    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id})"


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(settings.token_config())


@lru_cache
def get_session_transport() -> SessionTransport:
    return SessionTransport(settings.token_transport, settings.cookie_config())


async def get_current_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    transport: SessionTransport = Depends(get_session_transport),
) -> CurrentIdentity:
    """Resolve the caller or reject with 401.

    Raises NoTokenProvidedError when no carrier holds a token and
    InvalidTokenError when the token doesn't verify.
    """
    raw = extract_credential(
        request.cookies,
        request.headers.get("authorization"),
        cookie_name=transport.cookie.name,
    )
    subject = tokens.verify(raw)
    try:
        user_id = uuid.UUID(subject)
    except ValueError as e:
        raise InvalidTokenError() from e

    request.state.user_id = user_id
    structlog.contextvars.bind_contextvars(user_id=str(user_id))
    return CurrentIdentity(user_id=user_id)
