"""Channels, custom field definitions and fieldtypes.

A channel's custom fields live in a field group (``channels.field_group`` ->
``channel_fields.group_id``). Field values are stored in ``channel_data``
under the column ``field_id_<field_id>``; ``FieldCollection`` is the explicit
name -> field mapping used to resolve friendly names to those columns.

Tags:
    deep, models, channels, custom-fields

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from functools import cached_property

from sqlalchemy import Integer, Text, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship

from deep.errors import RelationNotLoadedError, UnknownFieldError
from deep.orm.base import DeepBase


class Fieldtype(DeepBase):
    __tablename__ = "fieldtypes"

    fieldtype_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    version: Mapped[str | None] = mapped_column(Text)
    settings: Mapped[str | None] = mapped_column(Text)
    has_global_settings: Mapped[str] = mapped_column(Text, default="n", nullable=False)

    def __repr__(self) -> str:
        return f"<Fieldtype {self.name!r}>"


class ChannelField(DeepBase):
    __tablename__ = "channel_fields"

    field_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    group_id: Mapped[int] = mapped_column(Integer, nullable=False)
    field_name: Mapped[str] = mapped_column(Text, nullable=False)
    field_label: Mapped[str] = mapped_column(Text, default="", nullable=False)
    field_instructions: Mapped[str | None] = mapped_column(Text)
    field_type: Mapped[str] = mapped_column(Text, default="text", nullable=False)
    field_list_items: Mapped[str] = mapped_column(Text, default="", nullable=False)
    field_required: Mapped[str] = mapped_column(Text, default="n", nullable=False)
    field_search: Mapped[str] = mapped_column(Text, default="n", nullable=False)
    field_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    field_settings: Mapped[str | None] = mapped_column(Text)

    # --- relationships ---
    fieldtype: Mapped[Fieldtype | None] = relationship(
        "Fieldtype",
        primaryjoin="Fieldtype.name == foreign(ChannelField.field_type)",
        uselist=False,
        viewonly=True,
    )

    @property
    def column_key(self) -> str:
        """Name of the ``channel_data`` column holding this field's values."""
        return f"field_id_{self.field_id}"

    @property
    def property_type(self) -> str:
        return self.field_type

    @property
    def is_required(self) -> bool:
        return self.field_required == "y"

    @property
    def list_items(self) -> list[str]:
        """Options of a list-style field (``select``, ``radio``...), one per line."""
        return [item.strip() for item in (self.field_list_items or "").splitlines() if item.strip()]

    def __repr__(self) -> str:
        return f"<ChannelField {self.field_name!r} field_id={self.field_id}>"


class Channel(DeepBase):
    __tablename__ = "channels"

    channel_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    channel_name: Mapped[str] = mapped_column(Text, nullable=False)
    channel_title: Mapped[str] = mapped_column(Text, default="", nullable=False)
    channel_url: Mapped[str | None] = mapped_column(Text)
    field_group: Mapped[int | None] = mapped_column(Integer)
    status_group: Mapped[int | None] = mapped_column(Integer)
    total_entries: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # --- relationships ---
    fields: Mapped[list[ChannelField]] = relationship(
        "ChannelField",
        primaryjoin="foreign(ChannelField.group_id) == Channel.field_group",
        order_by="ChannelField.field_order",
        viewonly=True,
    )

    @property
    def fields_loaded(self) -> bool:
        return "fields" not in inspect(self).unloaded

    @cached_property
    def field_collection(self) -> FieldCollection:
        """The channel's fields keyed by name, built once per channel instance."""
        if not self.fields_loaded:
            raise RelationNotLoadedError("fields", model="Channel")
        return FieldCollection(self.fields)

    def __repr__(self) -> str:
        return f"<Channel {self.channel_name!r}>"


class FieldCollection:
    """Read-only mapping of custom field name -> ``ChannelField``.

    Used per channel for attribute resolution and site-wide as the catalog
    the search scope resolves field names against.
    """

    def __init__(self, fields: Iterable[ChannelField] = ()) -> None:
        self._by_name: dict[str, ChannelField] = {}
        for field in fields:
            self._by_name[field.field_name] = field

    def has_field(self, name: str) -> bool:
        return name in self._by_name

    def find(self, name: str) -> ChannelField:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownFieldError(name) from None

    def get_field_id(self, name: str) -> int:
        return self.find(name).field_id

    def column_key(self, name: str) -> str:
        return self.find(name).column_key

    def of_type(self, field_type: str) -> list[ChannelField]:
        return [field for field in self._by_name.values() if field.field_type == field_type]

    def names(self) -> list[str]:
        return list(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ChannelField]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)
