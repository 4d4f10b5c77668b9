"""Asset and matrix column repositories."""

from __future__ import annotations

from sqlalchemy.orm import selectinload

from deep.models.asset import Asset, AssetsCollection
from deep.models.matrix import MatrixCol
from deep.query.asset import AssetQuery
from deep.query.matrix import MatrixColQuery
from deep.repositories.base import BaseRepository


class AssetRepository(BaseRepository):
    """Read access to ``assets_files``; upload preferences are always eager-loaded."""

    def query(self) -> AssetQuery:
        return AssetQuery()

    def fetch(self, query: AssetQuery) -> AssetsCollection:
        """Matching assets, once each even when selected in several entries."""
        assets = self.scalars(query.spec, selectinload(Asset.upload_pref))
        return AssetsCollection(dict.fromkeys(assets))

    def find(self, file_id: int) -> Asset | None:
        assets = self.fetch(self.query().file_id(file_id))
        return assets[0] if assets else None


class MatrixColRepository(BaseRepository):
    """Read access to ``matrix_cols``."""

    def query(self) -> MatrixColQuery:
        return MatrixColQuery()

    def fetch(self, query: MatrixColQuery) -> list[MatrixCol]:
        return list(self.scalars(query.spec))

    def for_field(self, field_id: int) -> list[MatrixCol]:
        return self.fetch(self.query().field_id(field_id))
