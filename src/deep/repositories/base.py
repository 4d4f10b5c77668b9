"""Base repository.

A repository *holds* a SQLAlchemy ``Session`` and executes query specs on
it. Models never run queries themselves; scopes only describe them.

Architecture::

    ┌───────────────────────────────────────────────────────────┐
    │                    BaseRepository                          │
    │                                                            │
    │   session: Session        ← caller-owned, request scoped   │
    │                                                            │
    │   rows(spec)      → list[RowMapping]                       │
    │   scalars(spec)   → list[model]                            │
    │   count(spec)     → int                                    │
    └───────────────────────────────────────────────────────────┘

Tags:
    repository, database, sqlalchemy, deep
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from deep.errors import DatabaseError
from deep.query.spec import QuerySpec


class BaseRepository:
    """Session-holding base class for the read repositories."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _run(self, stmt: Any) -> Any:
        try:
            return self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Query failed: {exc.__class__.__name__}", cause=exc) from exc

    def rows(self, spec: QuerySpec) -> Sequence[RowMapping]:
        """Execute *spec* and return rows as mappings."""
        return self._run(spec.to_select()).mappings().all()

    def scalars(self, spec: QuerySpec, *options: Any) -> Sequence[Any]:
        """Execute an entity spec and return the mapped instances."""
        stmt = spec.to_select()
        if options:
            stmt = stmt.options(*options)
        return self._run(stmt).scalars().all()

    def count(self, spec: QuerySpec) -> int:
        """Number of rows *spec* matches, ignoring limit and offset."""
        inner = spec.with_limit(None).with_offset(None).to_select().order_by(None).subquery()
        return self._run(select(func.count()).select_from(inner)).scalar_one()
