"""Cursor (keyset) pagination over a user's tasks.

Learn: Instead of OFFSET, each page remembers the sort value of its last
row (the cursor) and the next page asks for rows strictly beyond it:

    order=desc  →  orderBy <  cursor
    order=asc   →  orderBy >  cursor

We fetch limit + 1 rows; the extra row only tells us whether another
page exists and is never returned.

Rules worth knowing before changing anything here:
- The owner predicate is always added from the authenticated caller,
  never from request input.
- Only timestamp sorts (createdAt, updatedAt) honour a cursor. With
  orderBy=title, or a cursor that isn't a timestamp, the cursor is
  dropped silently and the first page is returned.
- A cursor is only meaningful with the orderBy/order that produced it;
  nothing checks that.
- There is no secondary sort key. Rows sharing an orderBy value can be
  split unpredictably across a page boundary (repeated or skipped).
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from tasksapi.db.filters import ContainsAny, Equals, Predicate, Range, Sort
from tasksapi.db.models import Task, as_utc
from tasksapi.db.repositories import TaskRepository
from tasksapi.errors import FieldError, ValidationFailedError

# API field name → column
ORDER_FIELDS: dict[str, str] = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
}
CURSOR_FIELDS = frozenset({"createdAt", "updatedAt"})
SEARCH_FIELDS = ("title", "description")

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class TaskFilters:
    search: Optional[str] = None
    completed: Optional[bool] = None


@dataclass(frozen=True)
class TaskSort:
    order_by: str = "createdAt"
    order: str = "desc"

    def __post_init__(self):
        errors = []
        if self.order_by not in ORDER_FIELDS:
            errors.append(FieldError(
                "orderBy", f"orderBy must be one of: {', '.join(ORDER_FIELDS)}"
            ))
        if self.order not in ("asc", "desc"):
            errors.append(FieldError("order", "order must be one of: asc, desc"))
        if errors:
            raise ValidationFailedError(errors)

    @property
    def column(self) -> str:
        return ORDER_FIELDS[self.order_by]

    @property
    def descending(self) -> bool:
        return self.order == "desc"


@dataclass
class Page:
    data: list[Task] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False
    limit: int = DEFAULT_LIMIT


def parse_cursor(cursor: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 cursor; anything unparseable yields None."""
    if not cursor:
        return None
    try:
        return as_utc(datetime.fromisoformat(cursor))
    except (ValueError, OverflowError):
        # Also covers offsets that push year 1 or 9999 out of range in UTC
        return None


def format_cursor(value: Any) -> str:
    """Stringify a sort value. Timestamps keep microseconds so strict
    comparisons against the next page stay exact."""
    if isinstance(value, datetime):
        return as_utc(value).isoformat(timespec="microseconds").replace(
            "+00:00", "Z"
        )
    return str(value)


def build_predicates(
    caller_id: uuid.UUID,
    filters: TaskFilters,
    sort: TaskSort,
    cursor: Optional[str] = None,
) -> list[Predicate]:
    """Translate list parameters into typed predicates for the store."""
    predicates: list[Predicate] = [Equals("user_id", caller_id)]

    if filters.search:
        predicates.append(ContainsAny(SEARCH_FIELDS, filters.search))

    if filters.completed is not None:
        predicates.append(Equals("completed", filters.completed))

    if cursor and sort.order_by in CURSOR_FIELDS:
        boundary = parse_cursor(cursor)
        if boundary is not None:
            if sort.descending:
                predicates.append(Range(sort.column, lt=boundary))
            else:
                predicates.append(Range(sort.column, gt=boundary))

    return predicates


class CursorPaginator:
    """Run one bounded, filtered, ordered fetch and wrap it as a Page."""

    def __init__(self, tasks: TaskRepository, max_limit: int = MAX_LIMIT):
        self.tasks = tasks
        self.max_limit = max_limit

    async def list(
        self,
        caller_id: uuid.UUID,
        filters: TaskFilters = TaskFilters(),
        sort: TaskSort = TaskSort(),
        cursor: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> Page:
        if limit < 1 or limit > self.max_limit:
            raise ValidationFailedError([
                FieldError("limit", f"limit must be between 1 and {self.max_limit}")
            ])

        predicates = build_predicates(caller_id, filters, sort, cursor)
        rows = await self.tasks.find_many(
            predicates,
            Sort(sort.column, descending=sort.descending),
            limit=limit + 1,
        )

        has_more = len(rows) > limit
        data = rows[:limit]

        next_cursor = None
        if has_more and data:
            next_cursor = format_cursor(getattr(data[-1], sort.column))

        return Page(data=data, next_cursor=next_cursor, has_more=has_more, limit=limit)
