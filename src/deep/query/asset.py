"""Asset query scopes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Table

from deep.models.asset import Asset, AssetSelection
from deep.query.spec import JoinDef, QuerySpec, as_list, join_registry

files: Table = Asset.__table__  # type: ignore[assignment]
selections: Table = AssetSelection.__table__  # type: ignore[assignment]


def asset_joins() -> Mapping[str, JoinDef]:
    return join_registry({
        "assets_selections": JoinDef(selections, selections.c.file_id == files.c.file_id),
    })


class AssetQuery:
    """Chainable filters over ``assets_files``; selects ``Asset`` entities."""

    def __init__(self, spec: QuerySpec | None = None) -> None:
        self.spec = spec if spec is not None else QuerySpec(
            source=files, columns=(Asset,), joins=asset_joins(),
        )

    def file_id(self, file_id: Any) -> AssetQuery:
        return AssetQuery(self.spec.where(files.c.file_id.in_(as_list(file_id))))

    def entry_id(self, entry_id: Any) -> AssetQuery:
        """Files selected in the given entries."""
        spec = self.spec.require_table("assets_selections")
        return AssetQuery(spec.where(selections.c.entry_id.in_(as_list(entry_id))))

    def field_id(self, field_id: Any) -> AssetQuery:
        """Files selected in the given fields."""
        spec = self.spec.require_table("assets_selections")
        return AssetQuery(spec.where(selections.c.field_id.in_(as_list(field_id))))

    def to_select(self):
        return self.spec.to_select()
