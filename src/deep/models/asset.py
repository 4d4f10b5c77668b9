"""Assets files, their upload directories and entry selections.

An ``Asset`` row only stores the file name; the public URL and the
filesystem path come from the ``UploadPref`` of the directory the file was
uploaded to (``assets_files.filedir_id`` -> ``upload_prefs.id``).

Tags:
    deep, models, assets, files

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import ForeignKey, Integer, Text, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship

from deep.errors import RelationNotLoadedError
from deep.orm.base import DeepBase


class UploadPref(DeepBase):
    __tablename__ = "upload_prefs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    site_id: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, default="", nullable=False)
    server_path: Mapped[str] = mapped_column(Text, default="", nullable=False)

    def __repr__(self) -> str:
        return f"<UploadPref {self.name!r}>"


class Asset(DeepBase):
    __tablename__ = "assets_files"

    file_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    filedir_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("upload_prefs.id"))
    folder_id: Mapped[int | None] = mapped_column(Integer)
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(Text)
    kind: Mapped[str | None] = mapped_column(Text)
    file_size: Mapped[int | None] = mapped_column(Integer)
    date: Mapped[int | None] = mapped_column(Integer)

    # --- relationships ---
    upload_pref: Mapped[UploadPref | None] = relationship("UploadPref")

    def _loaded_upload_pref(self) -> UploadPref:
        if "upload_pref" in inspect(self).unloaded or self.upload_pref is None:
            raise RelationNotLoadedError("upload_pref", model="Asset").with_context(
                file_id=self.file_id,
            )
        return self.upload_pref

    @property
    def url(self) -> str:
        return self._loaded_upload_pref().url + self.file_name

    @property
    def server_path(self) -> str:
        return self._loaded_upload_pref().server_path + self.file_name

    def __str__(self) -> str:
        return self.url

    def __repr__(self) -> str:
        return f"<Asset file_id={self.file_id} {self.file_name!r}>"


class AssetSelection(DeepBase):
    """Link row: which files are selected in which entry field (and matrix cell)."""

    __tablename__ = "assets_selections"

    file_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("assets_files.file_id"), primary_key=True
    )
    entry_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    field_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    col_id: Mapped[int] = mapped_column(Integer, primary_key=True, default=0)
    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, default=0)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_draft: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # --- relationships ---
    asset: Mapped[Asset] = relationship("Asset")


class AssetsCollection(list):
    """List of assets with the URL conveniences templates expect."""

    def __init__(self, assets: Iterable[Asset] = ()) -> None:
        super().__init__(assets)

    def urls(self) -> list[str]:
        return [asset.url for asset in self]

    def __str__(self) -> str:
        return self[0].url if self else ""
