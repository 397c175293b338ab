"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to modify a task (all optional)
- TaskRead: what the API returns
- TaskPage: the cursor-paginated list envelope
"""

import uuid
from typing import Optional

from pydantic import Field, StrictBool

from tasksapi.schemas.common import ApiModel, UtcDatetime


class TaskCreate(ApiModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class TaskUpdate(ApiModel):
    """Partial update: only non-None fields are applied."""
    title: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    completed: Optional[StrictBool] = None


class TaskRead(ApiModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    completed: bool
    user_id: uuid.UUID
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TaskPage(ApiModel):
    data: list[TaskRead]
    next_cursor: Optional[str]
    has_more: bool
    limit: int
