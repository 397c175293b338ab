"""User API — registration, login/logout, profile.

Learn: register and login are open; everything else asks for
get_current_user. Login hands the token back through the configured
SessionTransport: as an httpOnly cookie (default) or in the body for
bearer clients.

- POST /users/register     → create account (201)
- POST /users/login        → email/password → session token
- POST /users/logout       → clear the session cookie
- GET  /users/me           → profile
- PUT  /users/me           → update name/email
- PUT  /users/me/password  → change password
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tasksapi.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    get_session_transport,
    get_token_service,
)
from tasksapi.auth.jwt import TokenService
from tasksapi.auth.transport import SessionTransport
from tasksapi.db.engine import get_db
from tasksapi.schemas.common import MessageResponse
from tasksapi.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisteredUser,
    RegisterRequest,
    UpdateProfileRequest,
    UserRead,
)
from tasksapi.services.user_service import UserService

router = APIRouter(prefix="/users")


def _user_svc(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> UserService:
    return UserService(db, tokens)


def _authed_user_svc(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> UserService:
    return UserService(db, tokens)


# ─── Register / Login / Logout ───────────────────────────


@router.post("/register", response_model=RegisteredUser, status_code=201)
async def register(body: RegisterRequest, svc: UserService = Depends(_user_svc)):
    """Create a new user account."""
    return await svc.register(name=body.name, email=body.email, password=body.password)


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
)
async def login(
    body: LoginRequest,
    response: Response,
    svc: UserService = Depends(_user_svc),
    transport: SessionTransport = Depends(get_session_transport),
):
    """Login with email and password → session token (cookie or body)."""
    user, token = await svc.login(body.email, body.password)
    extra = transport.deliver(response, token)
    return LoginResponse(user=UserRead.model_validate(user), **extra)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    identity: CurrentIdentity = Depends(get_current_user),
    transport: SessionTransport = Depends(get_session_transport),
):
    """Drop the session cookie. The token itself stays valid until it expires."""
    transport.clear(response)
    return MessageResponse(message="Logout successful")


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_authed_user_svc),
):
    return await svc.get_profile(identity.user_id)


@router.put("/me", response_model=UserRead)
async def update_me(
    body: UpdateProfileRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_authed_user_svc),
):
    return await svc.update_profile(identity.user_id, name=body.name, email=body.email)


@router.put("/me/password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_authed_user_svc),
):
    await svc.change_password(
        identity.user_id, body.current_password, body.new_password
    )
    return MessageResponse(message="Password changed successfully")
