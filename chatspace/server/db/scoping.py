"""Ownership scoping for queries.

Access control is a query filter: a row owned by someone else simply does not
match, so it is reported exactly like a missing row.  Every owner-scoped
statement goes through :func:`scope_to_owner` so the rule lives in one place.
"""

from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy import Delete, Select, Update

_Stmt = TypeVar("_Stmt", Select[Any], Update, Delete)


def scope_to_owner(stmt: _Stmt, entity: Any, owner_id: str) -> _Stmt:
    """Restrict *stmt* to rows of *entity* whose ``owner_id`` equals *owner_id*."""
    return stmt.where(entity.owner_id == owner_id)
