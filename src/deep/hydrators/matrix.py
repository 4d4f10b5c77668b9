"""Hydrate ``matrix`` fields with their rows.

Each matrix field value becomes a list of row dicts keyed by column name,
plus ``row_id``, in ``row_order``.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from sqlalchemy import Table, select
from sqlalchemy.orm import Session

from deep.hydrators.base import AbstractHydrator
from deep.logging import get_logger
from deep.models.entry import EntryCollection
from deep.models.matrix import MatrixCol
from deep.orm.reflection import reflect_table
from deep.query.matrix import MatrixColQuery

logger = get_logger(__name__)


class MatrixHydrator(AbstractHydrator):
    fieldtype = "matrix"

    def __init__(self, session: Session, matrix_data: Table | None = None) -> None:
        self.session = session
        self._matrix_data = matrix_data
        self._cols: dict[int, list[MatrixCol]] = defaultdict(list)
        self._rows: dict[tuple[int, int], list[dict[str, Any]]] = defaultdict(list)

    @property
    def matrix_data(self) -> Table:
        if self._matrix_data is None:
            self._matrix_data = reflect_table(self.session.connection(), "matrix_data")
        return self._matrix_data

    def preload(self, collection: EntryCollection) -> None:
        self._cols.clear()
        self._rows.clear()
        fields = collection.fields_of_type(self.fieldtype)
        if not fields or not collection:
            return
        field_ids = [field.field_id for field in fields]

        query = MatrixColQuery().field_id(field_ids)
        for col in self.session.scalars(query.to_select()).all():
            self._cols[col.field_id].append(col)

        data = self.matrix_data
        stmt = (
            select(data)
            .where(
                data.c.entry_id.in_(collection.entry_ids()),
                data.c.field_id.in_(field_ids),
                data.c.is_draft == 0,
            )
            .order_by(data.c.entry_id, data.c.field_id, data.c.row_order)
        )
        count = 0
        for row in self.session.execute(stmt).mappings():
            self._rows[(row["entry_id"], row["field_id"])].append(self._build_row(row))
            count += 1

        logger.debug("matrix_preloaded", rows=count, fields=len(fields))

    def _build_row(self, row: Any) -> dict[str, Any]:
        built: dict[str, Any] = {"row_id": row["row_id"]}
        for col in self._cols.get(row["field_id"], []):
            built[col.col_name] = row.get(col.column_key)
        return built

    def hydrate(self, collection: EntryCollection) -> None:
        for entry in collection:
            if not entry.has_channel or not entry.channel.fields_loaded:
                continue
            for field in entry.channel.field_collection.of_type(self.fieldtype):
                rows = self._rows.get((entry.entry_id, field.field_id), [])
                entry.set_attribute(field.field_name, list(rows))

    def columns(self, field_id: int) -> list[MatrixCol]:
        """Columns loaded for *field_id* by the last ``preload``."""
        return list(self._cols.get(field_id, []))
