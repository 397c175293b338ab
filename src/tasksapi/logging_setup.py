"""structlog configuration.

Development gets the console renderer, production gets one JSON object
per line. request_id and user_id are merged in from contextvars.
request_id is bound by middleware and shows up on every entry for the
request. user_id is bound by the auth guard inside the endpoint, so it
shows up on entries logged by handlers and services; the access log
adds it separately from request.state.
"""

import logging

import structlog

from tasksapi.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog once, at app startup."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.is_production:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
