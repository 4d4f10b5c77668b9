"""Immutable query specification.

``QuerySpec`` is a frozen value describing one SELECT: the source table,
the selected columns, which registry joins are applied, the predicates and
the ordering. Every operation returns a new spec, so a partially-built query
can be shared and extended without affecting other users of it.

Joins are never added ad hoc. Each query type owns a *join registry*
(table name -> ``JoinDef``) that is handed to the spec at construction;
``require_table(name)`` applies a registry join at most once no matter how
many scopes ask for it.

Architecture::

    EntryQuery.group_id(1).username("ann")
        │                      │
        ▼                      ▼
    spec.require_table("members")   ← second call is a no-op
        │
        ▼
    QuerySpec(joined=("channel_data", "members"), predicates=(...))
        │
        ▼
    to_select()  →  sqlalchemy.Select

Tags:
    deep, query, sqlalchemy, immutable, joins

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from sqlalchemy import ColumnElement, FromClause, Select, select


@dataclass(frozen=True, eq=False)
class JoinDef:
    """How to join one registry table onto the query source."""

    table: FromClause
    onclause: ColumnElement[bool]
    isouter: bool = False


def join_registry(joins: Mapping[str, JoinDef]) -> Mapping[str, JoinDef]:
    """Freeze a ``{table name: JoinDef}`` mapping."""
    return MappingProxyType(dict(joins))


def as_list(value: Any) -> list[Any]:
    """Normalize a scalar or a collection of scalars to a list."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return [value]
    return list(value)


@dataclass(frozen=True, eq=False)
class QuerySpec:
    source: FromClause
    columns: tuple[Any, ...]
    joins: Mapping[str, JoinDef] = field(default_factory=lambda: join_registry({}))
    joined: tuple[str, ...] = ()
    predicates: tuple[ColumnElement[bool], ...] = ()
    leading_orders: tuple[Any, ...] = ()
    orders: tuple[Any, ...] = ()
    limit: int | None = None
    offset: int | None = None

    def where(self, *clauses: ColumnElement[bool]) -> QuerySpec:
        return replace(self, predicates=self.predicates + clauses)

    def has_join(self, name: str) -> bool:
        return name in self.joined

    def require_table(self, name: str) -> QuerySpec:
        """Apply the registry join for *name* once.

        Names that are not in the registry leave the spec unchanged.
        """
        if name not in self.joins or name in self.joined:
            return self
        return replace(self, joined=self.joined + (name,))

    def order_by(self, *clauses: Any) -> QuerySpec:
        return replace(self, orders=self.orders + clauses)

    def prepend_order(self, *clauses: Any) -> QuerySpec:
        """Order by *clauses* ahead of every other ordering, including later ones."""
        return replace(self, leading_orders=clauses + self.leading_orders)

    def with_limit(self, limit: int | None) -> QuerySpec:
        return replace(self, limit=limit)

    def with_offset(self, offset: int | None) -> QuerySpec:
        return replace(self, offset=offset)

    def with_columns(self, *columns: Any) -> QuerySpec:
        return replace(self, columns=columns)

    def to_select(self) -> Select:
        stmt = select(*self.columns).select_from(self.source)
        for name in self.joined:
            join = self.joins[name]
            stmt = stmt.join(join.table, join.onclause, isouter=join.isouter)
        if self.predicates:
            stmt = stmt.where(*self.predicates)
        ordering = self.leading_orders + self.orders
        if ordering:
            stmt = stmt.order_by(*ordering)
        if self.limit is not None:
            stmt = stmt.limit(self.limit)
        if self.offset is not None:
            stmt = stmt.offset(self.offset)
        return stmt


__all__ = ["JoinDef", "QuerySpec", "as_list", "join_registry"]
