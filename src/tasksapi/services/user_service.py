"""User service — registration, login and profile management."""

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from tasksapi.auth.credentials import CredentialStore
from tasksapi.auth.jwt import TokenService
from tasksapi.db.models import User
from tasksapi.db.repositories import UserRepository
from tasksapi.errors import ConflictError, InvalidCredentialsError, NotFoundError

logger = structlog.get_logger()


class UserService:
    def __init__(self, db: AsyncSession, tokens: TokenService):
        self.users = UserRepository(db)
        self.credentials = CredentialStore(self.users)
        self.tokens = tokens

    async def register(self, name: str, email: str, password: str) -> User:
        """Create an account; emails are unique and compared as stored."""
        if await self.credentials.email_taken(email):
            raise ConflictError("User with this email already exists")

        user = await self.users.create(
            name=name,
            email=email,
            password_hash=await self.credentials.hash(password),
        )
        logger.info("users.registered", user_id=str(user.id))
        return user

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and issue a session token."""
        try:
            user = await self.credentials.authenticate(email, password)
        except InvalidCredentialsError:
            logger.warning("auth.login_failed")
            raise

        if self.credentials.needs_rehash(user.password_hash):
            user = await self.users.update(
                user, password_hash=await self.credentials.hash(password)
            )
            logger.info("auth.password_rehashed", user_id=str(user.id))
        token = self.tokens.issue(str(user.id))
        logger.info("auth.login", user_id=str(user.id))
        return user, token

    async def get_profile(self, user_id: uuid.UUID) -> User:
        user = await self.users.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(
        self,
        user_id: uuid.UUID,
        name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> User:
        """Change name and/or email. Keeping your own email is not a conflict."""
        user = await self.get_profile(user_id)

        if email is not None:
            existing = await self.credentials.find_by_email(email)
            if existing and existing.id != user_id:
                raise ConflictError("Email already in use")

        changes = {}
        if name is not None:
            changes["name"] = name
        if email is not None:
            changes["email"] = email
        if changes:
            user = await self.users.update(user, **changes)
        return user

    async def change_password(
        self,
        user_id: uuid.UUID,
        current_password: str,
        new_password: str,
    ) -> None:
        user = await self.get_profile(user_id)
        if not await self.credentials.verify(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        await self.users.update(
            user, password_hash=await self.credentials.hash(new_password)
        )
        logger.info("users.password_changed", user_id=str(user_id))
