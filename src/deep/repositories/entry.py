"""Entry repository.

Runs ``EntryQuery`` specs and turns the joined rows into hydrated
``EntryCollection`` objects:

1. execute the spec (``channel_titles`` JOIN ``channel_data`` + scopes)
2. build one ``Entry`` per row
3. eager-load channel -> fields -> fieldtype for every distinct channel
4. run the hydrators for the fieldtypes present (assets, matrix, ...)

Tags:
    repository, entries, hydration, deep

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Table, select
from sqlalchemy.orm import Session, joinedload, selectinload

from deep.hydrators import HYDRATORS, AbstractHydrator
from deep.logging import LogContext, get_logger
from deep.models.channel import Channel, ChannelField, FieldCollection
from deep.models.entry import Entry, EntryCollection
from deep.orm.reflection import numbered_columns, reflect_table
from deep.query.entry import EntryQuery, SearchPolicy
from deep.repositories.base import BaseRepository
from deep.settings import DeepSettings

logger = get_logger(__name__)


class EntryRepository(BaseRepository):
    """Read access to channel entries."""

    def __init__(
        self,
        session: Session,
        *,
        search_policy: SearchPolicy = "strict",
        channel_data: Table | None = None,
        hydrators: dict[str, type[AbstractHydrator]] | None = None,
    ) -> None:
        super().__init__(session)
        self.search_policy = search_policy
        self._channel_data = channel_data
        self._fields: FieldCollection | None = None
        self.hydrators = dict(HYDRATORS if hydrators is None else hydrators)
        self._hydrator_instances: dict[str, AbstractHydrator] = {}

    @classmethod
    def from_settings(cls, session: Session, settings: DeepSettings) -> EntryRepository:
        return cls(session, search_policy=settings.search_policy)

    # -- schema ------------------------------------------------------------------

    @property
    def channel_data(self) -> Table:
        """``channel_data`` with every ``field_id_<n>`` column of this installation."""
        if self._channel_data is None:
            self._channel_data = reflect_table(self.session.connection(), "channel_data")
            logger.debug(
                "channel_data_loaded",
                field_columns=len(numbered_columns(self._channel_data)),
            )
        return self._channel_data

    def field_catalog(self) -> FieldCollection:
        """Every custom field of the site, by name. Loaded once per repository."""
        if self._fields is None:
            fields = self.session.scalars(select(ChannelField).order_by(ChannelField.field_id)).all()
            self._fields = FieldCollection(fields)
        return self._fields

    # -- queries -----------------------------------------------------------------

    def query(self) -> EntryQuery:
        return EntryQuery(
            channel_data=self.channel_data,
            fields=self.field_catalog(),
            search_policy=self.search_policy,
        )

    def fetch(self, query: EntryQuery) -> EntryCollection:
        query = query.with_channel_data(self.channel_data)
        rows = self.rows(query.spec)
        entries = [Entry(row) for row in rows]

        channels = self._load_channels({entry.channel_id for entry in entries})
        for entry in entries:
            entry.set_channel(channels.get(entry.channel_id))

        collection = EntryCollection(entries)
        if collection:
            with LogContext(entry_count=len(collection)):
                collection.hydrate(self._hydrators_for(collection))

        logger.debug("entries_fetched", count=len(collection), channels=len(channels))
        return collection

    def first(self, query: EntryQuery) -> Entry | None:
        collection = self.fetch(query.limit(1))
        return collection[0] if collection else None

    def find(self, entry_id: int) -> Entry | None:
        return self.first(self.query().entry_id(entry_id))

    def count_entries(self, query: EntryQuery) -> int:
        return self.count(query.with_channel_data(self.channel_data).spec)

    # -- internals ---------------------------------------------------------------

    def _load_channels(self, channel_ids: Iterable[int]) -> dict[int, Channel]:
        channel_ids = sorted(set(channel_ids))
        if not channel_ids:
            return {}
        stmt = (
            select(Channel)
            .where(Channel.channel_id.in_(channel_ids))
            .options(selectinload(Channel.fields).joinedload(ChannelField.fieldtype))
        )
        return {channel.channel_id: channel for channel in self.session.scalars(stmt).all()}

    def _hydrators_for(self, collection: EntryCollection) -> list[AbstractHydrator]:
        field_types = collection.field_types()
        return [self._hydrator(fieldtype) for fieldtype in self.hydrators if fieldtype in field_types]

    def _hydrator(self, fieldtype: str) -> AbstractHydrator:
        """One hydrator per fieldtype for the life of the repository."""
        if fieldtype not in self._hydrator_instances:
            self._hydrator_instances[fieldtype] = self.hydrators[fieldtype](self.session)
        return self._hydrator_instances[fieldtype]
