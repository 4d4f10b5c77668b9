"""Hydrate ``assets`` fields with the selected files."""

from __future__ import annotations

from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from deep.hydrators.base import AbstractHydrator
from deep.logging import get_logger
from deep.models.asset import Asset, AssetsCollection, AssetSelection
from deep.models.entry import EntryCollection

logger = get_logger(__name__)


class AssetsHydrator(AbstractHydrator):
    """Replace each assets field value with an ``AssetsCollection``.

    Only top-level selections are used (``col_id``/``row_id`` of 0); files
    picked inside matrix cells belong to the matrix row.
    """

    fieldtype = "assets"

    def __init__(self, session: Session) -> None:
        self.session = session
        self._selected: dict[tuple[int, int], list[Asset]] = defaultdict(list)

    def preload(self, collection: EntryCollection) -> None:
        self._selected.clear()
        fields = collection.fields_of_type(self.fieldtype)
        if not fields or not collection:
            return

        stmt = (
            select(AssetSelection)
            .options(joinedload(AssetSelection.asset).joinedload(Asset.upload_pref))
            .where(
                AssetSelection.entry_id.in_(collection.entry_ids()),
                AssetSelection.field_id.in_([field.field_id for field in fields]),
                AssetSelection.col_id == 0,
                AssetSelection.row_id == 0,
                AssetSelection.is_draft == 0,
            )
            .order_by(AssetSelection.entry_id, AssetSelection.field_id, AssetSelection.sort_order)
        )
        selections = self.session.scalars(stmt).unique().all()
        for selection in selections:
            self._selected[(selection.entry_id, selection.field_id)].append(selection.asset)

        logger.debug("assets_preloaded", selections=len(selections), fields=len(fields))

    def hydrate(self, collection: EntryCollection) -> None:
        for entry in collection:
            if not entry.has_channel or not entry.channel.fields_loaded:
                continue
            for field in entry.channel.field_collection.of_type(self.fieldtype):
                assets = self._selected.get((entry.entry_id, field.field_id), [])
                entry.set_attribute(field.field_name, AssetsCollection(assets))
