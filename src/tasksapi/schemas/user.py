"""Pydantic schemas for users and sessions.

The password digest never appears in any response model.
"""

import uuid
from typing import Optional

from pydantic import Field

from tasksapi.schemas.common import ApiModel, Email, UtcDatetime


class RegisterRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Email
    password: str = Field(..., min_length=6)


class LoginRequest(ApiModel):
    email: Email
    password: str


class UpdateProfileRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[Email] = None


class ChangePasswordRequest(ApiModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class UserRead(ApiModel):
    id: uuid.UUID
    name: str
    email: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class RegisteredUser(ApiModel):
    id: uuid.UUID
    name: str
    email: str
    created_at: UtcDatetime


class LoginResponse(ApiModel):
    """Cookie mode returns only the user; bearer mode adds the token."""
    user: UserRead
    token: Optional[str] = None
