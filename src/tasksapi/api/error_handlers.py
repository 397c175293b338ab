"""Error handlers — the one place typed errors become HTTP responses.

Invariants:
    - TasksApiError → its own status_code and {"message": ...}
    - RequestValidationError → 400 {"message": "Validation error", "details": [{field, message}]}
    - Starlette HTTPException (unknown route, bad method) → {"message": ...}
    - Exception (catch-all) → 500 "Internal server error", never leaks internals
    - "stack" is only added outside production
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tasksapi.config import settings
from tasksapi.errors import (
    FieldError,
    InternalError,
    InvalidTokenError,
    NoTokenProvidedError,
    TasksApiError,
    ValidationFailedError,
)

logger = structlog.get_logger()


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _include_stack() -> bool:
    return not settings.is_production


def _log_context(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


def error_response(exc: TasksApiError) -> JSONResponse:
    headers = None
    if isinstance(exc, (NoTokenProvidedError, InvalidTokenError)):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(include_stack=_include_stack()),
        headers=headers,
    )


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TasksApiError)
    async def domain_error_handler(request: Request, exc: TasksApiError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "request.error",
            code=exc.code,
            status_code=exc.status_code,
            error=exc.message,
            **_log_context(request),
        )
        return error_response(exc)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = [
            FieldError(field=_field_name(e["loc"]), message=e["msg"])
            for e in exc.errors()
        ]
        logger.warning(
            "request.validation_error",
            fields=[d.field for d in details],
            **_log_context(request),
        )
        return error_response(ValidationFailedError(details))


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Not Found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": message},
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all. Internal details never reach the client."""
        logger.error("request.unhandled_error", exc_info=exc, **_log_context(request))
        internal = InternalError()
        internal.__cause__ = exc
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=internal.to_response(include_stack=_include_stack()),
        )


def _field_name(loc: tuple) -> str:
    """("body", "title") → "title"; ("query", "limit") → "limit"."""
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header", "cookie")]
    return ".".join(parts) or ".".join(str(p) for p in loc)
