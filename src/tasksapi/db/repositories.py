"""Store adapters — the only code that talks to the database.

Services call these with plain values and typed predicates
(db/filters.py) and never build SQL themselves. Every store failure is
rolled back and re-raised as InternalError so nothing untyped crosses
into the service layer; the two exceptions are email uniqueness
(ConflictError) and rows that vanished under a concurrent request
(NotFoundError).
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from tasksapi.db.filters import Predicate, Sort, compile_predicates, compile_sort
from tasksapi.db.models import Task, User
from tasksapi.errors import ConflictError, InternalError, NotFoundError

logger = structlog.get_logger()


@asynccontextmanager
async def _store_errors(
    db: AsyncSession, operation: str, missing: str = "Task not found"
):
    """Roll back and classify store failures."""
    try:
        yield
    except StaleDataError as e:
        await db.rollback()
        raise NotFoundError(missing) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("store.error", operation=operation, error=str(e))
        raise InternalError() from e


class UserRepository:
    """Credential store: users by id and by (unique) email."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        async with _store_errors(self.db, "user.get"):
            return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        async with _store_errors(self.db, "user.get_by_email"):
            result = await self.db.execute(select(User).where(User.email == email))
            return result.scalars().first()

    async def create(self, name: str, email: str, password_hash: str) -> User:
        user = User(name=name, email=email, password_hash=password_hash)
        try:
            async with _store_errors(self.db, "user.create"):
                self.db.add(user)
                await self.db.commit()
        except InternalError as e:
            # Lost a race with a concurrent registration for the same email
            if isinstance(e.__cause__, IntegrityError):
                raise ConflictError("User with this email already exists") from e
            raise
        return user

    async def update(self, user: User, **changes) -> User:
        try:
            async with _store_errors(self.db, "user.update", "User not found"):
                for key, value in changes.items():
                    setattr(user, key, value)
                await self.db.commit()
        except InternalError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise ConflictError("Email already in use") from e
            raise
        return user


class TaskRepository:
    """Task store: CRUD by id plus predicate-driven listing."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, task_id: uuid.UUID) -> Optional[Task]:
        async with _store_errors(self.db, "task.get"):
            return await self.db.get(Task, task_id, populate_existing=True)

    async def create(
        self, user_id: uuid.UUID, title: str, description: str = ""
    ) -> Task:
        task = Task(user_id=user_id, title=title, description=description)
        async with _store_errors(self.db, "task.create"):
            self.db.add(task)
            await self.db.commit()
        return task

    async def find_many(
        self,
        predicates: list[Predicate],
        sort: Sort,
        limit: int,
    ) -> list[Task]:
        query = (
            select(Task)
            .where(*compile_predicates(Task, predicates))
            .order_by(compile_sort(Task, sort))
            .limit(limit)
        )
        async with _store_errors(self.db, "task.find_many"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def update(self, task: Task, **changes) -> Task:
        async with _store_errors(self.db, "task.update"):
            for key, value in changes.items():
                setattr(task, key, value)
            await self.db.commit()
        return task

    async def delete(self, task_id: uuid.UUID) -> None:
        async with _store_errors(self.db, "task.delete"):
            result = await self.db.execute(delete(Task).where(Task.id == task_id))
            await self.db.commit()
        if result.rowcount == 0:
            raise NotFoundError("Task not found")
