"""FastAPI application factory.

Learn: App factory pattern. create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (logging, Redis, database).
Middleware, CORS, error handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasksapi import __version__
from tasksapi.api import api_router
from tasksapi.api.error_handlers import register_error_handlers
from tasksapi.api.health import router as health_router
from tasksapi.config import Settings, settings
from tasksapi.logging_setup import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    cfg: Settings = app.state.settings
    configure_logging(cfg)
    logger.info(
        "tasksapi.starting",
        version=__version__,
        environment=cfg.environment,
        token_transport=cfg.token_transport,
    )

    from tasksapi.cache.redis import close_redis, init_redis
    if cfg.rate_limit_enabled:
        try:
            await init_redis(cfg.redis_url)
            logger.info("tasksapi.redis_connected")
        except Exception as e:
            # Only rate limiting depends on Redis
            logger.warning("tasksapi.redis_unavailable", error=str(e))

    yield

    logger.info("tasksapi.shutdown")
    await close_redis()

    from tasksapi.db.engine import engine
    await engine.dispose()


def create_app(cfg: Settings = settings) -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Tasks API",
        description="Authenticated per-user task management",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api-docs",
        redoc_url=None,
    )
    app.state.settings = cfg

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → AccessLog → Security → RateLimit → CORS → handler

    from tasksapi.middleware.access_log import AccessLogMiddleware
    from tasksapi.middleware.rate_limit import RateLimitMiddleware
    from tasksapi.middleware.request_id import RequestIdMiddleware
    from tasksapi.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=cfg.rate_limit_rpm,
        auth_rpm=cfg.rate_limit_auth_rpm,
        enabled=cfg.rate_limit_enabled,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: tasksapi.main:app)
app = create_app()
