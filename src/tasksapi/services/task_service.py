"""Task service — business logic for a user's private tasks.

Learn: Every operation receives the caller's id from the auth guard,
never from the request body. Single-task operations go through the
OwnershipResolver; listing goes through the CursorPaginator, which adds
the owner predicate itself.

    create  → owner = caller, description defaults to ""
    get     → resolve(access)
    update  → resolve(update) → write
    delete  → resolve(delete) → delete
    list    → paginate(owner = caller, filters, sort, cursor)
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from tasksapi.db.models import Task
from tasksapi.db.repositories import TaskRepository
from tasksapi.services.ownership import OwnershipResolver
from tasksapi.services.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    CursorPaginator,
    Page,
    TaskFilters,
    TaskSort,
)

logger = structlog.get_logger()

UPDATABLE_FIELDS = ("title", "description", "completed")


class TaskService:
    """Business logic for task CRUD and listing."""

    def __init__(self, db: AsyncSession, max_limit: int = MAX_LIMIT):
        self.tasks = TaskRepository(db)
        self.ownership = OwnershipResolver(self.tasks)
        self.paginator = CursorPaginator(self.tasks, max_limit=max_limit)

    # ─── Create ──────────────────────────────────────────

    async def create_task(
        self,
        user_id: uuid.UUID,
        title: str,
        description: Optional[str] = None,
    ) -> Task:
        """Create a task owned by user_id. A missing description is stored as ""."""
        task = await self.tasks.create(
            user_id=user_id,
            title=title,
            description=description or "",
        )
        logger.info("tasks.created", task_id=str(task.id))
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, task_id: uuid.UUID, user_id: uuid.UUID) -> Task:
        return await self.ownership.resolve(task_id, user_id, action="access")

    async def list_tasks(
        self,
        user_id: uuid.UUID,
        search: Optional[str] = None,
        completed: Optional[bool] = None,
        order_by: str = "createdAt",
        order: str = "desc",
        cursor: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> Page:
        return await self.paginator.list(
            user_id,
            filters=TaskFilters(search=search, completed=completed),
            sort=TaskSort(order_by=order_by, order=order),
            cursor=cursor,
            limit=limit,
        )

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        task_id: uuid.UUID,
        user_id: uuid.UUID,
        **changes,
    ) -> Task:
        """Apply title/description/completed changes; None values are skipped."""
        task = await self.ownership.resolve(task_id, user_id, action="update")

        applied = {
            k: v for k, v in changes.items()
            if k in UPDATABLE_FIELDS and v is not None
        }
        if applied:
            task = await self.tasks.update(task, **applied)
            logger.info("tasks.updated", task_id=str(task_id), fields=sorted(applied))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, task_id: uuid.UUID, user_id: uuid.UUID) -> None:
        await self.ownership.resolve(task_id, user_id, action="delete")
        await self.tasks.delete(task_id)
        logger.info("tasks.deleted", task_id=str(task_id))
