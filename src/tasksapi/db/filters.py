"""Typed query predicates for the store adapters.

Services describe *what* to fetch with a small set of frozen predicate
nodes; only the repository knows how to turn them into SQL. This keeps
query construction out of the service layer and makes the list query
inspectable in unit tests without a database.

    Equals("user_id", uid)                       user_id = :uid
    ContainsAny(("title", "description"), "x")   title ILIKE '%x%' OR description ILIKE '%x%'
    Range("created_at", lt=ts)                   created_at < :ts
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from sqlalchemy import ColumnElement, and_, or_


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class ContainsAny:
    """Case-insensitive substring match against any of `fields`."""

    fields: tuple[str, ...]
    term: str


@dataclass(frozen=True)
class Range:
    """Strict bounds on an orderable field. Either side may be omitted."""

    field: str
    lt: Optional[datetime] = None
    gt: Optional[datetime] = None


Predicate = Union[Equals, ContainsAny, Range]


@dataclass(frozen=True)
class Sort:
    field: str
    descending: bool = True


def _column(model, field: str):
    try:
        return model.__table__.c[field]
    except KeyError:
        raise ValueError(f"{model.__name__} has no column '{field}'") from None


def compile_predicate(model, node: Predicate) -> ColumnElement[bool]:
    """Translate one predicate node into a SQLAlchemy clause."""
    if isinstance(node, Equals):
        return _column(model, node.field) == node.value

    if isinstance(node, ContainsAny):
        return or_(
            *(
                _column(model, f).icontains(node.term, autoescape=True)
                for f in node.fields
            )
        )

    if isinstance(node, Range):
        col = _column(model, node.field)
        bounds = []
        if node.lt is not None:
            bounds.append(col < node.lt)
        if node.gt is not None:
            bounds.append(col > node.gt)
        if not bounds:
            raise ValueError(f"Range on '{node.field}' has no bounds")
        return and_(*bounds)

    raise TypeError(f"Unsupported predicate: {node!r}")


def compile_predicates(model, nodes: list[Predicate]) -> list[ColumnElement[bool]]:
    return [compile_predicate(model, n) for n in nodes]


def compile_sort(model, sort: Sort):
    col = _column(model, sort.field)
    return col.desc() if sort.descending else col.asc()
