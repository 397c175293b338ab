"""tasksapi CLI — run the server and manage the schema.

Usage:
    tasksapi serve                   # uvicorn on TASKSAPI_HOST:TASKSAPI_PORT
    tasksapi serve --reload          # dev mode
    tasksapi init-db                 # create tables from the ORM models
    tasksapi init-db --drop          # drop everything first (dev only)

Production schemas should be managed with Alembic (alembic upgrade head);
init-db is meant for local development and throwaway databases.
"""

from __future__ import annotations

import asyncio

import click

from tasksapi.config import settings


@click.group()
def cli():
    """Tasks API management commands."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: settings.host)")
@click.option("--port", default=None, type=int, help="Port (default: settings.port)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "tasksapi.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


async def _init_db(drop: bool) -> None:
    from tasksapi.db.engine import engine
    from tasksapi.db.models import Base

    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


@cli.command("init-db")
@click.option("--drop", is_flag=True, help="Drop existing tables first")
def init_db(drop: bool):
    """Create all tables."""
    if drop and settings.is_production:
        raise click.UsageError("--drop is refused when TASKSAPI_ENVIRONMENT=production")
    asyncio.run(_init_db(drop))
    click.echo("Database schema ready.")


if __name__ == "__main__":
    cli()
