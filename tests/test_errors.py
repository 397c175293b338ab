"""Error taxonomy and HTTP error mapping tests."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tasksapi.api.error_handlers import register_error_handlers
from tasksapi.errors import (
    ConflictError,
    FieldError,
    ForbiddenError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    NoTokenProvidedError,
    NotFoundError,
    TasksApiError,
    ValidationFailedError,
)


# ═══════════════════════════════════════════════════════════
# Taxonomy
# ═══════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "exc, status",
    [
        (NoTokenProvidedError(), 401),
        (InvalidTokenError(), 401),
        (InvalidCredentialsError(), 401),
        (NotFoundError("Task not found"), 404),
        (ForbiddenError("nope"), 403),
        (ValidationFailedError(), 400),
        (ConflictError("taken"), 409),
        (InternalError(), 500),
    ],
)
def test_status_mapping(exc, status):
    assert isinstance(exc, TasksApiError)
    assert exc.status_code == status


def test_default_messages():
    assert NoTokenProvidedError().message == "No token provided"
    assert InvalidTokenError().message == "Invalid token"
    assert InternalError().message == "Internal server error"
    assert ValidationFailedError().message == "Validation error"


def test_response_body_without_stack():
    assert NotFoundError("Task not found").to_response() == {"message": "Task not found"}


def test_response_body_with_stack():
    try:
        raise ConflictError("taken")
    except ConflictError as e:
        body = e.to_response(include_stack=True)
    assert body["message"] == "taken"
    assert "ConflictError" in body["stack"]


def test_validation_details():
    exc = ValidationFailedError([FieldError("title", "too short")])
    assert exc.to_response() == {
        "message": "Validation error",
        "details": [{"field": "title", "message": "too short"}],
    }


# ═══════════════════════════════════════════════════════════
# HTTP mapping
# ═══════════════════════════════════════════════════════════


def _app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictError("Email already in use")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    return app


@pytest.mark.asyncio
async def test_domain_error_maps_to_status():
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
        r = await ac.get("/conflict")
    assert r.status_code == 409
    assert r.json()["message"] == "Email already in use"
    # Non-production responses carry the stack
    assert "stack" in r.json()


@pytest.mark.asyncio
async def test_unexpected_error_is_generic_500():
    transport = ASGITransport(app=_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/boom")
    assert r.status_code == 500
    assert r.json()["message"] == "Internal server error"


@pytest.mark.asyncio
async def test_stack_hidden_in_production(monkeypatch):
    from tasksapi.config import settings

    monkeypatch.setattr(settings, "environment", "production")
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
        r = await ac.get("/conflict")
    assert r.json() == {"message": "Email already in use"}


@pytest.mark.asyncio
async def test_unknown_route_is_json_404(client):
    r = await client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json() == {"message": "Not Found"}


@pytest.mark.asyncio
async def test_malformed_json_is_400(client, alice):
    r = await client.post(
        "/api/tasks",
        content=b"{not json",
        headers={**alice.headers, "Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Validation error"
