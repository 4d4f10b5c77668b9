"""Entry query scopes.

``EntryQuery`` is an immutable, chainable set of named filters over
``channel_titles`` joined with ``channel_data``::

    query = (
        repo.query()
        .channel_name("blog")
        .status(["open", "featured"])
        .show_future_entries(False)
        .sticky()
        .limit(10)
    )
    entries = repo.fetch(query)

Scopes that need another table (``channels``, ``members``) request it from
the join registry, so each table is joined once regardless of how many
scopes use it.

Tags:
    deep, query, entries, scopes

Doc-Types:
    api-reference
"""

from __future__ import annotations

import datetime
import time
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any, Literal

from sqlalchemy import Table, case, or_

from deep.errors import QueryError, UnknownFieldError
from deep.logging import get_logger
from deep.models.channel import Channel, FieldCollection
from deep.models.entry import ChannelData, ChannelTitle
from deep.models.member import Member
from deep.query.spec import JoinDef, QuerySpec, as_list, join_registry

logger = get_logger(__name__)

SearchPolicy = Literal["strict", "lenient"]

titles: Table = ChannelTitle.__table__  # type: ignore[assignment]


def entry_joins(channel_data: Table) -> Mapping[str, JoinDef]:
    """Join registry for entry queries."""
    channels: Table = Channel.__table__  # type: ignore[assignment]
    members: Table = Member.__table__  # type: ignore[assignment]
    return join_registry({
        "channel_data": JoinDef(channel_data, channel_data.c.entry_id == titles.c.entry_id),
        "channels": JoinDef(channels, channels.c.channel_id == titles.c.channel_id),
        "members": JoinDef(members, members.c.member_id == titles.c.author_id),
    })


def new_entry_spec(channel_data: Table | None = None) -> QuerySpec:
    """Base spec: every ``channel_titles`` column plus the ``channel_data`` columns it lacks."""
    data = channel_data if channel_data is not None else ChannelData.__table__
    columns = (*titles.c, *(col for col in data.c if col.key not in titles.c))
    spec = QuerySpec(source=titles, columns=columns, joins=entry_joins(data))
    return spec.require_table("channel_data")


def _to_epoch(value: int | datetime.datetime) -> int:
    if isinstance(value, datetime.datetime):
        return int(value.timestamp())
    return int(value)


class EntryQuery:
    """Chainable entry filters; every scope returns a new query."""

    def __init__(
        self,
        spec: QuerySpec | None = None,
        *,
        channel_data: Table | None = None,
        fields: FieldCollection | None = None,
        search_policy: SearchPolicy = "strict",
    ) -> None:
        self.channel_data: Table = channel_data if channel_data is not None else ChannelData.__table__
        self.spec = spec if spec is not None else new_entry_spec(self.channel_data)
        self.fields = fields
        self.search_policy = search_policy

    def _derive(self, spec: QuerySpec) -> EntryQuery:
        return EntryQuery(
            spec,
            channel_data=self.channel_data,
            fields=self.fields,
            search_policy=self.search_policy,
        )

    def with_channel_data(self, channel_data: Table) -> EntryQuery:
        """The same query over *channel_data*, e.g. the reflected table with every field column."""
        if channel_data is self.channel_data:
            return self
        base = new_entry_spec(channel_data)
        spec = replace(self.spec, columns=base.columns, joins=base.joins)
        return EntryQuery(
            spec,
            channel_data=channel_data,
            fields=self.fields,
            search_policy=self.search_policy,
        )

    def _where(self, *clauses: Any) -> EntryQuery:
        return self._derive(self.spec.where(*clauses))

    def _require(self, name: str) -> QuerySpec:
        return self.spec.require_table(name)

    # -- entries ---------------------------------------------------------------

    def entry_id(self, entry_id: Any) -> EntryQuery:
        return self._where(titles.c.entry_id.in_(as_list(entry_id)))

    def not_entry_id(self, entry_id: Any) -> EntryQuery:
        return self._where(titles.c.entry_id.not_in(as_list(entry_id)))

    def entry_id_from(self, entry_id: int) -> EntryQuery:
        return self._where(titles.c.entry_id >= entry_id)

    def entry_id_to(self, entry_id: int) -> EntryQuery:
        return self._where(titles.c.entry_id <= entry_id)

    def url_title(self, url_title: Any) -> EntryQuery:
        return self._where(titles.c.url_title.in_(as_list(url_title)))

    def status(self, status: Any) -> EntryQuery:
        return self._where(titles.c.status.in_(as_list(status)))

    # -- channels ----------------------------------------------------------------

    def channel_id(self, channel_id: Any) -> EntryQuery:
        return self._where(titles.c.channel_id.in_(as_list(channel_id)))

    def channel_name(self, channel_name: Any) -> EntryQuery:
        spec = self._require("channels")
        channels = spec.joins["channels"].table
        return self._derive(spec.where(channels.c.channel_name.in_(as_list(channel_name))))

    # -- authors -----------------------------------------------------------------

    def author_id(self, author_id: Any) -> EntryQuery:
        return self._where(titles.c.author_id.in_(as_list(author_id)))

    def group_id(self, group_id: Any) -> EntryQuery:
        spec = self._require("members")
        members = spec.joins["members"].table
        return self._derive(spec.where(members.c.group_id.in_(as_list(group_id))))

    def not_group_id(self, group_id: Any) -> EntryQuery:
        spec = self._require("members")
        members = spec.joins["members"].table
        return self._derive(spec.where(members.c.group_id.not_in(as_list(group_id))))

    def username(self, username: Any) -> EntryQuery:
        spec = self._require("members")
        members = spec.joins["members"].table
        return self._derive(spec.where(members.c.username.in_(as_list(username))))

    # -- dates ---------------------------------------------------------------------

    def start_on(self, start_on: int | datetime.datetime) -> EntryQuery:
        return self._where(titles.c.entry_date >= _to_epoch(start_on))

    def stop_before(self, stop_before: int | datetime.datetime) -> EntryQuery:
        return self._where(titles.c.entry_date < _to_epoch(stop_before))

    def year(self, year: int | str) -> EntryQuery:
        return self._where(titles.c.year == str(year))

    def month(self, month: int | str) -> EntryQuery:
        return self._where(titles.c.month == f"{int(month):02d}")

    def day(self, day: int | str) -> EntryQuery:
        return self._where(titles.c.day == f"{int(day):02d}")

    def show_expired(self, show_expired: bool = True, *, now: int | None = None) -> EntryQuery:
        if show_expired:
            return self
        now = int(time.time()) if now is None else now
        expiration = titles.c.expiration_date
        return self._where(or_(expiration.is_(None), expiration == 0, expiration > now))

    def show_future_entries(self, show_future: bool = True, *, now: int | None = None) -> EntryQuery:
        if show_future:
            return self
        now = int(time.time()) if now is None else now
        return self._where(titles.c.entry_date <= now)

    # -- ordering / paging -----------------------------------------------------------

    def fixed_order(self, entry_ids: Iterable[int]) -> EntryQuery:
        """Restrict to *entry_ids* and return them in that exact sequence."""
        entry_ids = as_list(entry_ids)
        query = self.entry_id(entry_ids)
        if not entry_ids:
            return query
        positions: dict[Any, int] = {}
        for position, entry_id in enumerate(entry_ids):
            positions.setdefault(entry_id, position)
        ordering = case(positions, value=titles.c.entry_id, else_=len(positions))
        return query._derive(query.spec.order_by(ordering.asc()))

    def sticky(self, sticky: bool = True) -> EntryQuery:
        """Sticky entries first, ahead of any other ordering."""
        if not sticky:
            return self
        return self._derive(self.spec.prepend_order(titles.c.sticky.desc()))

    def order_by(self, column: str, direction: str = "asc") -> EntryQuery:
        if column not in titles.c:
            raise QueryError(f"Cannot order entries by unknown column {column!r}").with_context(
                table="channel_titles",
            )
        direction = direction.lower()
        if direction not in ("asc", "desc"):
            raise QueryError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
        clause = titles.c[column].asc() if direction == "asc" else titles.c[column].desc()
        return self._derive(self.spec.order_by(clause))

    def limit(self, limit: int) -> EntryQuery:
        if limit < 0:
            raise QueryError(f"limit must be >= 0, got {limit}")
        return self._derive(self.spec.with_limit(limit))

    def offset(self, offset: int) -> EntryQuery:
        if offset < 0:
            raise QueryError(f"offset must be >= 0, got {offset}")
        return self._derive(self.spec.with_offset(offset))

    # -- custom fields -----------------------------------------------------------------

    def search(self, criteria: Mapping[str, Any]) -> EntryQuery:
        """Partial-match custom fields by name.

        Values for one field are ORed, fields are ANDed. Field names that do
        not resolve raise ``UnknownFieldError`` under the ``strict`` policy
        and are logged and skipped under ``lenient``. A known field whose column
        is missing from ``channel_data`` raises ``QueryError``.
        """
        spec = self._require("channel_data")
        data = spec.joins["channel_data"].table

        for field_name, values in criteria.items():
            try:
                if self.fields is None:
                    raise UnknownFieldError(field_name)
                definition = self.fields.find(field_name)
            except UnknownFieldError:
                if self.search_policy == "strict":
                    raise
                logger.warning("search_field_skipped", field_name=field_name)
                continue

            key = definition.column_key
            if key not in data.c:
                raise QueryError(
                    f"Field {field_name!r} has no column {key!r} in {data.name}"
                ).with_context(field_name=field_name, table=data.name)
            column = data.c[key]
            values = as_list(values)
            if not values:
                continue
            spec = spec.where(or_(*(column.contains(str(value), autoescape=True) for value in values)))

        return self._derive(spec)

    # -- output ------------------------------------------------------------------

    def to_select(self):
        return self.spec.to_select()

    def __repr__(self) -> str:
        return f"<EntryQuery joined={list(self.spec.joined)} predicates={len(self.spec.predicates)}>"
