"""Credential store adapter.

Wraps the two things login and registration need from the outside
world: password hashing and the unique-email lookup.
"""

from typing import Optional

from tasksapi.auth.password import (
    hash_password_async,
    needs_rehash as digest_needs_rehash,
    verify_password_async,
)
from tasksapi.db.models import User
from tasksapi.db.repositories import UserRepository
from tasksapi.errors import InvalidCredentialsError


class CredentialStore:
    def __init__(self, users: UserRepository):
        self.users = users

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.users.get_by_email(email)

    async def email_taken(self, email: str) -> bool:
        return await self.find_by_email(email) is not None

    async def hash(self, password: str) -> str:
        return await hash_password_async(password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await verify_password_async(password, password_hash)

    def needs_rehash(self, password_hash: str) -> bool:
        return digest_needs_rehash(password_hash)

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user for a matching email/password pair.

        Unknown email and wrong password raise the same error so the
        response doesn't reveal which accounts exist.
        """
        user = await self.find_by_email(email)
        if not user or not await self.verify(password, user.password_hash):
            raise InvalidCredentialsError("Invalid email or password")
        return user
