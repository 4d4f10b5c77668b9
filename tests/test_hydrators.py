"""Tests for the assets and matrix hydrators, run through EntryRepository.fetch."""

from __future__ import annotations

from deep.hydrators import HYDRATORS, AssetsHydrator, MatrixHydrator
from deep.models import AssetsCollection
from deep.repositories import EntryRepository


class TestRegistry:
    def test_keyed_by_fieldtype(self):
        assert HYDRATORS == {"assets": AssetsHydrator, "matrix": MatrixHydrator}


class TestAssetsHydrator:
    def test_selected_files_in_sort_order(self, repo):
        images = repo.find(1).get("images")
        assert isinstance(images, AssetsCollection)
        assert [asset.file_name for asset in images] == ["diagram.png", "photo.jpg"]

    def test_assets_carry_upload_pref(self, repo):
        images = repo.find(1).get("images")
        assert images.urls() == [
            "https://example.com/uploads/diagram.png",
            "https://example.com/uploads/photo.jpg",
        ]
        assert str(images) == "https://example.com/uploads/diagram.png"

    def test_draft_selections_are_ignored(self, repo):
        images = repo.find(3).get("images")
        assert images == []
        assert str(images) == ""

    def test_matrix_cell_selections_are_ignored(self, repo):
        entries = repo.fetch(repo.query().entry_id([1, 2]).order_by("entry_id"))
        assert [asset.file_id for asset in entries[0].get("images")] == [2, 1]
        assert [asset.file_id for asset in entries[1].get("images")] == [1]

    def test_channels_without_assets_fields(self, repo):
        assert repo.find(4).get("images") is None

    def test_preload_without_fields_is_noop(self, repo, session):
        entries = repo.fetch(repo.query().channel_name("news"))
        hydrator = AssetsHydrator(session)
        entries.hydrate([hydrator])
        assert all("images" not in entry.attributes for entry in entries)


class TestMatrixHydrator:
    def test_rows_in_row_order(self, repo):
        assert repo.find(1).get("gallery") == [
            {"row_id": 2, "caption": "First caption", "credit": "Ann"},
            {"row_id": 1, "caption": "Second caption", "credit": "Bob"},
        ]

    def test_entry_without_rows(self, repo):
        assert repo.find(2).get("gallery") == []

    def test_columns_after_preload(self, repo, session):
        entries = repo.fetch(repo.query().entry_id(1))
        hydrator = MatrixHydrator(session)
        hydrator.preload(entries)
        assert [col.col_name for col in hydrator.columns(4)] == ["caption", "credit"]
        assert hydrator.columns(99) == []


class TestRepositoryHydration:
    def test_hydrators_can_be_disabled(self, session):
        repo = EntryRepository(session, hydrators={})
        entry = repo.find(1)
        assert entry.get("images") is None
        assert entry.get("gallery") is None

    def test_only_registered_hydrators_run(self, session):
        repo = EntryRepository(session, hydrators={"assets": AssetsHydrator})
        entry = repo.find(1)
        assert isinstance(entry.get("images"), AssetsCollection)
        assert entry.get("gallery") is None
