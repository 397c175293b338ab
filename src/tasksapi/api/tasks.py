"""Task API routes.

Learn: These routes only translate HTTP into service calls. The whole
router is mounted behind the auth guard (see api/__init__.py), and the
service dependency asks for the identity first, so by the time a
handler body runs the caller is known and every task id has passed the
UUID format check.

- POST   /tasks        create (201)
- GET    /tasks        cursor-paginated list
- GET    /tasks/{id}   read
- PUT    /tasks/{id}   partial update
- DELETE /tasks/{id}   delete (204)
"""

import re
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tasksapi.auth.dependencies import CurrentIdentity, get_current_user
from tasksapi.config import settings
from tasksapi.db.engine import get_db
from tasksapi.errors import FieldError, ValidationFailedError
from tasksapi.schemas.task import TaskCreate, TaskPage, TaskRead, TaskUpdate
from tasksapi.services.task_service import TaskService

router = APIRouter(prefix="/tasks")

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def _task_svc(
    identity: CurrentIdentity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> TaskService:
    return TaskService(db, max_limit=settings.pagination_max_limit)


def task_id_param(id: str = Path(..., description="Task UUID")) -> uuid.UUID:
    """Reject anything but a hyphenated UUID before the handler runs."""
    if not UUID_RE.match(id):
        raise ValidationFailedError(
            [FieldError("id", "Invalid UUID format")],
            message="Invalid UUID format for 'id'",
        )
    return uuid.UUID(id)


def _parse_completed(value: Optional[str]) -> Optional[bool]:
    # Only the literal strings filter; anything else means "no filter".
    if value == "true":
        return True
    if value == "false":
        return False
    return None


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task owned by the caller."""
    return await svc.create_task(
        user_id=identity.user_id,
        title=body.title,
        description=body.description,
    )


@router.get("", response_model=TaskPage)
async def list_tasks(
    cursor: Optional[str] = Query(None, description="nextCursor from the previous page"),
    limit: int = Query(
        settings.pagination_default_limit, ge=1, le=settings.pagination_max_limit
    ),
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    completed: Optional[str] = Query(None, description='"true" or "false"'),
    order_by: str = Query("createdAt", alias="orderBy", pattern=r"^(createdAt|updatedAt|title)$"),
    order: str = Query("desc", pattern=r"^(asc|desc)$"),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks, newest first by default."""
    page = await svc.list_tasks(
        identity.user_id,
        search=search,
        completed=_parse_completed(completed),
        order_by=order_by,
        order=order,
        cursor=cursor,
        limit=limit,
    )
    return TaskPage(
        data=[TaskRead.model_validate(t) for t in page.data],
        next_cursor=page.next_cursor,
        has_more=page.has_more,
        limit=page.limit,
    )


@router.get("/{id}", response_model=TaskRead)
async def get_task(
    identity: CurrentIdentity = Depends(get_current_user),
    task_id: uuid.UUID = Depends(task_id_param),
    svc: TaskService = Depends(_task_svc),
):
    return await svc.get_task(task_id, identity.user_id)


@router.put("/{id}", response_model=TaskRead)
async def update_task(
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    task_id: uuid.UUID = Depends(task_id_param),
    svc: TaskService = Depends(_task_svc),
):
    """Partially update title, description and/or completed."""
    return await svc.update_task(
        task_id,
        identity.user_id,
        title=body.title,
        description=body.description,
        completed=body.completed,
    )


@router.delete("/{id}", status_code=204)
async def delete_task(
    identity: CurrentIdentity = Depends(get_current_user),
    task_id: uuid.UUID = Depends(task_id_param),
    svc: TaskService = Depends(_task_svc),
):
    await svc.delete_task(task_id, identity.user_id)
    return Response(status_code=204)
