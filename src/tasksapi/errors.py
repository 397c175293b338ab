"""Error taxonomy — typed exceptions for every failure the API surfaces.

Invariants:
    - Every error carries a message, a machine code and a fixed HTTP status
    - The status mapping is part of the API contract:
      NoTokenProvided/InvalidToken/InvalidCredentials → 401, Forbidden → 403,
      NotFound → 404, ValidationFailed → 400, Conflict → 409, Internal → 500
    - to_response() never includes a stack trace unless asked to

The HTTP layer (api/error_handlers.py) is the only place these are turned
into responses; services and repositories only raise.
"""

import traceback
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FieldError:
    """One rejected input field."""

    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class TasksApiError(Exception):
    """Base exception for all typed API errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self, include_stack: bool = False) -> dict:
        """Convert to the JSON error body: {"message": ..., ["stack": ...]}."""
        body: dict = {"message": self.message}
        if include_stack:
            body["stack"] = "".join(traceback.format_exception(self))
        return body


# ─── Authentication (401) ────────────────────────────────


class NoTokenProvidedError(TasksApiError):
    """No session credential found in any carrier."""

    code = "NO_TOKEN_PROVIDED"
    status_code = 401

    def __init__(self, message: str = "No token provided"):
        super().__init__(message)


class InvalidTokenError(TasksApiError):
    """Credential present but forged, malformed or expired.

    Expiry and forgery deliberately share this one kind.
    """

    code = "INVALID_TOKEN"
    status_code = 401

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class InvalidCredentialsError(TasksApiError):
    """Email/password (or current password) did not match."""

    code = "INVALID_CREDENTIALS"
    status_code = 401

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


# ─── Ownership (403/404) ─────────────────────────────────


class ForbiddenError(TasksApiError):
    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(TasksApiError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Not Found"):
        super().__init__(message)


# ─── Input (400) / state (409) ───────────────────────────


class ValidationFailedError(TasksApiError):
    """Input did not match the expected shape."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        details: Optional[list[FieldError]] = None,
        message: str = "Validation error",
    ):
        super().__init__(message)
        self.details = details or []

    def to_response(self, include_stack: bool = False) -> dict:
        body = super().to_response(include_stack)
        if self.details:
            body["details"] = [d.to_dict() for d in self.details]
        return body


class ConflictError(TasksApiError):
    """Uniqueness violation (e.g. duplicate email)."""

    code = "CONFLICT"
    status_code = 409


# ─── Internal (500) ──────────────────────────────────────


class InternalError(TasksApiError):
    """Anything unexpected, including store failures.

    The public message stays generic; the original exception is kept as
    __cause__ for logging.
    """

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
