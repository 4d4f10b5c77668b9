"""Channel entries.

An entry is one ``channel_titles`` row joined with its ``channel_data`` row.
The custom field columns of ``channel_data`` are numbered (``field_id_<n>``)
and differ per installation, so ``Entry`` is a plain record over the joined
row rather than a mapped class. ``ChannelTitle`` and ``ChannelData`` map the
fixed part of both tables.

Custom field values are read by their field name through ``Entry.get`` (or
``entry[name]``). The name is resolved with the owning channel's
``FieldCollection`` and the resolved value is memoized on the entry::

    entry.get("body")      # -> attributes["field_id_3"], cached as "body"
    entry.get("nope")      # -> None
    entry.field("nope")    # -> UnknownFieldError

Date columns come back as timezone-aware UTC datetimes. ``edit_date`` is a
packed ``YYYYMMDDHHMMSS`` number rather than an epoch.

Entries are read-only; ``Entry.save()`` raises ``NotSupportedError``.

Tags:
    deep, models, entries, custom-fields, dates

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

import datetime
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from deep.errors import NotSupportedError, RelationNotLoadedError
from deep.models.channel import Channel, ChannelField
from deep.orm.base import DeepBase

if TYPE_CHECKING:
    from deep.hydrators.base import AbstractHydrator


class ChannelTitle(DeepBase):
    __tablename__ = "channel_titles"

    entry_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    channel_id: Mapped[int] = mapped_column(Integer, nullable=False)
    author_id: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url_title: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, default="open", nullable=False)
    sticky: Mapped[str] = mapped_column(Text, default="n", nullable=False)
    allow_comments: Mapped[str] = mapped_column(Text, default="y", nullable=False)
    entry_date: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    expiration_date: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    comment_expiration_date: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    recent_comment_date: Mapped[int | None] = mapped_column(Integer)
    edit_date: Mapped[int | None] = mapped_column(Integer)
    year: Mapped[str] = mapped_column(Text, default="", nullable=False)
    month: Mapped[str] = mapped_column(Text, default="", nullable=False)
    day: Mapped[str] = mapped_column(Text, default="", nullable=False)
    comment_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class ChannelData(DeepBase):
    __tablename__ = "channel_data"

    entry_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    channel_id: Mapped[int] = mapped_column(Integer, nullable=False)


# -- Date conversion ----------------------------------------------------------


def epoch_to_datetime(value: Any) -> datetime.datetime | None:
    """Unix time -> aware UTC datetime. ``0`` is the epoch, not "no date"."""
    if value is None or value == "":
        return None
    return datetime.datetime.fromtimestamp(int(value), tz=datetime.timezone.utc)


def optional_epoch_to_datetime(value: Any) -> datetime.datetime | None:
    """Unix time -> aware UTC datetime, or ``None`` for ``0``/empty."""
    if not value or value == "0":
        return None
    return epoch_to_datetime(value)


def packed_to_datetime(value: Any) -> datetime.datetime | None:
    """``YYYYMMDDHHMMSS`` -> aware UTC datetime, or ``None`` for ``0``/empty."""
    if not value or value == "0":
        return None
    parsed = datetime.datetime.strptime(str(value), "%Y%m%d%H%M%S")
    return parsed.replace(tzinfo=datetime.timezone.utc)


DATE_ATTRIBUTES: dict[str, Callable[[Any], datetime.datetime | None]] = {
    "entry_date": epoch_to_datetime,
    "expiration_date": optional_epoch_to_datetime,
    "comment_expiration_date": optional_epoch_to_datetime,
    "recent_comment_date": optional_epoch_to_datetime,
    "edit_date": packed_to_datetime,
}


# -- Entry ----------------------------------------------------------------------


class Entry:
    """A read-only channel entry."""

    def __init__(self, attributes: Mapping[str, Any], channel: Channel | None = None) -> None:
        self.attributes: dict[str, Any] = dict(attributes)
        self._channel = channel

    # -- relations -----------------------------------------------------------

    @property
    def channel(self) -> Channel:
        if self._channel is None:
            raise RelationNotLoadedError("channel", model="Entry").with_context(
                entry_id=self.attributes.get("entry_id"),
            )
        return self._channel

    def set_channel(self, channel: Channel | None) -> None:
        self._channel = channel

    @property
    def has_channel(self) -> bool:
        return self._channel is not None

    def _fields_available(self) -> bool:
        return self._channel is not None and self._channel.fields_loaded

    # -- attribute access ----------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Read an attribute or a custom field by name.

        Falls back to *default* when *key* is neither a loaded column nor a
        field of the entry's channel.
        """
        if key not in self.attributes:
            if not (self._fields_available() and self._channel.field_collection.has_field(key)):
                return default
            column = self._channel.field_collection.column_key(key)
            self.attributes[key] = self.attributes.get(column)

        value = self.attributes[key]
        convert = DATE_ATTRIBUTES.get(key)
        return convert(value) if convert else value

    def field(self, name: str) -> Any:
        """Strict custom field accessor.

        Raises:
            RelationNotLoadedError: the channel or its fields were not loaded
            UnknownFieldError: *name* is not a field of the entry's channel
        """
        channel = self.channel
        if not channel.fields_loaded:
            raise RelationNotLoadedError("channel.fields", model="Entry")
        definition = channel.field_collection.find(name)
        if name not in self.attributes:
            self.attributes[name] = self.attributes.get(definition.column_key)
        return self.attributes[name]

    def field_definition(self, name: str) -> ChannelField:
        return self.channel.field_collection.find(name)

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        if key in self.attributes:
            return True
        return (
            isinstance(key, str)
            and self._fields_available()
            and self._channel.field_collection.has_field(key)
        )

    # -- columns ---------------------------------------------------------------

    @property
    def entry_id(self) -> int:
        return self.attributes["entry_id"]

    @property
    def channel_id(self) -> int:
        return self.attributes["channel_id"]

    @property
    def author_id(self) -> int:
        return self.attributes.get("author_id", 0)

    @property
    def title(self) -> str:
        return self.attributes.get("title", "")

    @property
    def url_title(self) -> str:
        return self.attributes.get("url_title", "")

    @property
    def status(self) -> str:
        return self.attributes.get("status", "")

    @property
    def entry_date(self) -> datetime.datetime | None:
        return self.get("entry_date")

    @property
    def expiration_date(self) -> datetime.datetime | None:
        return self.get("expiration_date")

    @property
    def comment_expiration_date(self) -> datetime.datetime | None:
        return self.get("comment_expiration_date")

    @property
    def recent_comment_date(self) -> datetime.datetime | None:
        return self.get("recent_comment_date")

    @property
    def edit_date(self) -> datetime.datetime | None:
        return self.get("edit_date")

    # -- persistence -------------------------------------------------------------

    def save(self, **options: Any) -> None:
        """Entries are read-only."""
        raise NotSupportedError("Saving is not supported", model="Entry")

    def to_dict(self) -> dict[str, Any]:
        return dict(self.attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return self.attributes.get("entry_id") == other.attributes.get("entry_id")

    def __hash__(self) -> int:
        return hash(("Entry", self.attributes.get("entry_id")))

    def __repr__(self) -> str:
        return f"<Entry entry_id={self.attributes.get('entry_id')} {self.title!r}>"


class EntryCollection(list):
    """The entries returned by one query, hydrated as a batch."""

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        super().__init__(entries)

    def entry_ids(self) -> list[int]:
        return [entry.entry_id for entry in self]

    def channels(self) -> list[Channel]:
        seen: dict[int, Channel] = {}
        for entry in self:
            if entry.has_channel:
                seen.setdefault(entry.channel.channel_id, entry.channel)
        return list(seen.values())

    def channel_ids(self) -> list[int]:
        return sorted({entry.channel_id for entry in self})

    def fields_of_type(self, field_type: str) -> list[ChannelField]:
        fields: dict[int, ChannelField] = {}
        for channel in self.channels():
            if not channel.fields_loaded:
                continue
            for field in channel.field_collection.of_type(field_type):
                fields.setdefault(field.field_id, field)
        return list(fields.values())

    def field_types(self) -> set[str]:
        types: set[str] = set()
        for channel in self.channels():
            if channel.fields_loaded:
                types.update(field.field_type for field in channel.field_collection)
        return types

    def find(self, entry_id: int) -> Entry | None:
        for entry in self:
            if entry.entry_id == entry_id:
                return entry
        return None

    def hydrate(self, hydrators: Iterable[AbstractHydrator]) -> EntryCollection:
        """Run every hydrator's ``preload`` pass, then every ``hydrate`` pass."""
        hydrators = list(hydrators)
        for hydrator in hydrators:
            hydrator.preload(self)
        for hydrator in hydrators:
            hydrator.hydrate(self)
        return self
