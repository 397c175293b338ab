"""Ownership gate for single-task operations.

The task is fetched by id with no owner filter, then classified:

    missing             → NotFoundError   (404)
    someone else's      → ForbiddenError  (403)
    caller's own        → the task

Existence is always decided first, so probing another user's task id
answers 403 rather than 404. That leaks existence; it is the API's
documented behaviour and the tests pin it.

Read, update and delete each run a fresh resolve. Nothing is locked
between the check and the mutation: if the task disappears in that
window the mutation step reports NotFound instead.
"""

import uuid

from tasksapi.db.models import Task
from tasksapi.db.repositories import TaskRepository
from tasksapi.errors import ForbiddenError, NotFoundError

ACTIONS = ("access", "update", "delete")


class OwnershipResolver:
    def __init__(self, tasks: TaskRepository):
        self.tasks = tasks

    async def resolve(
        self,
        task_id: uuid.UUID,
        caller_id: uuid.UUID,
        action: str = "access",
    ) -> Task:
        if action not in ACTIONS:
            raise ValueError(f"Unknown action: {action!r}")

        task = await self.tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task not found")

        if task.user_id != caller_id:
            raise ForbiddenError(f"You don't have permission to {action} this task")

        return task
