"""Tests for EntryRepository against the seeded database."""

from __future__ import annotations

import pytest
import structlog
from sqlalchemy import Column, Integer, MetaData, Table, event

from deep.errors import DatabaseError
from deep.hydrators import AbstractHydrator
from deep.logging import clear_context
from deep.models import Entry, EntryCollection
from deep.orm.reflection import MATRIX_COLUMN, numbered_columns, reflect_table
from deep.query.entry import EntryQuery
from deep.query.spec import QuerySpec
from deep.repositories import EntryRepository
from deep.settings import DeepSettings


class TestFetch:
    def test_returns_entry_collection(self, repo):
        entries = repo.fetch(repo.query())
        assert isinstance(entries, EntryCollection)
        assert all(isinstance(entry, Entry) for entry in entries)
        assert len(entries) == 5

    def test_channels_and_fields_are_loaded(self, repo):
        entry = repo.find(1)
        assert entry.channel.channel_name == "blog"
        assert entry.channel.fields_loaded
        assert entry.channel.field_collection.names() == ["body", "summary", "images", "gallery", "category"]

    def test_fieldtypes_are_loaded(self, repo):
        images = repo.find(1).field_definition("images")
        assert images.fieldtype.version == "2.1"

    def test_custom_fields_by_name(self, repo):
        entry = repo.find(1)
        assert entry.get("body") == "Hello world body"
        assert entry.get("summary") == "Summary one"
        assert entry.get("category") == "news"

    def test_fields_are_per_channel(self, repo):
        entry = repo.find(5)
        assert entry.get("headline") == "Old headline"
        assert entry.get("body") is None

    def test_entries_share_channel_instances(self, repo):
        entries = repo.fetch(repo.query().channel_name("blog"))
        assert len({id(entry.channel) for entry in entries}) == 1

    def test_empty_result(self, repo):
        entries = repo.fetch(repo.query().entry_id(999))
        assert entries == []
        assert isinstance(entries, EntryCollection)


class TestLookups:
    def test_find(self, repo):
        assert repo.find(2).title == "Second post"
        assert repo.find(999) is None

    def test_first(self, repo):
        assert repo.first(repo.query().order_by("entry_id", "desc")).entry_id == 5

    def test_count_ignores_paging(self, repo):
        assert repo.count_entries(repo.query().channel_name("blog").order_by("title").limit(1).offset(1)) == 3


class TestSchema:
    def test_channel_data_is_reflected(self, repo):
        assert numbered_columns(repo.channel_data) == {n: f"field_id_{n}" for n in range(1, 7)}

    def test_field_catalog_is_cached(self, repo):
        catalog = repo.field_catalog()
        assert repo.field_catalog() is catalog
        assert "headline" in catalog
        assert len(catalog) == 6

    def test_matrix_columns(self, session):
        matrix_data = reflect_table(session.connection(), "matrix_data")
        assert numbered_columns(matrix_data, MATRIX_COLUMN) == {1: "col_id_1", 2: "col_id_2"}


class TestErrors:
    def test_database_errors_are_wrapped(self, repo):
        missing = Table("missing_table", MetaData(), Column("id", Integer))
        with pytest.raises(DatabaseError) as exc_info:
            repo.rows(QuerySpec(source=missing, columns=(missing.c.id,)))
        assert exc_info.value.cause is not None
        assert exc_info.value.__cause__ is exc_info.value.cause


class TestConfiguration:
    def test_from_settings(self, session):
        repo = EntryRepository.from_settings(session, DeepSettings(search_policy="lenient"))
        assert repo.search_policy == "lenient"
        assert repo.query().search_policy == "lenient"

    def test_default_policy_is_strict(self, repo):
        assert repo.search_policy == "strict"


class TestChannelDataBinding:
    def test_fetch_rebinds_plain_queries(self, repo):
        entries = repo.fetch(EntryQuery().entry_id(1))
        assert entries[0].get("body") == "Hello world body"
        assert [asset.file_name for asset in entries[0].get("images")] == ["diagram.png", "photo.jpg"]

    def test_count_rebinds_plain_queries(self, repo):
        assert repo.count_entries(EntryQuery().channel_name("blog")) == 3

    def test_rebinding_to_same_table_is_a_no_op(self, repo):
        query = repo.query()
        assert query.with_channel_data(repo.channel_data) is query

    def test_rebinding_keeps_scopes(self, repo):
        query = EntryQuery().channel_name("news").order_by("entry_id", "desc")
        rebound = query.with_channel_data(repo.channel_data)
        assert rebound.channel_data is repo.channel_data
        assert query.channel_data is not repo.channel_data
        assert [entry.entry_id for entry in repo.fetch(rebound)] == [5, 4]


class TestHydratorReuse:
    @pytest.fixture
    def matrix_reflections(self, engine):
        statements: list[str] = []

        def record(conn, cursor, statement, parameters, context, executemany):
            if "PRAGMA" in statement and "matrix_data" in statement:
                statements.append(statement)

        event.listen(engine, "before_cursor_execute", record)
        yield statements
        event.remove(engine, "before_cursor_execute", record)

    def test_matrix_data_is_reflected_once(self, repo, matrix_reflections):
        repo.fetch(repo.query())
        assert matrix_reflections
        matrix_reflections.clear()

        for _ in range(3):
            entries = repo.fetch(repo.query())
            assert [row["caption"] for row in entries.find(1).get("gallery")] == ["First caption", "Second caption"]
        assert matrix_reflections == []

    def test_hydrators_are_kept_per_fieldtype(self, repo):
        first = repo._hydrators_for(repo.fetch(repo.query()))
        second = repo._hydrators_for(repo.fetch(repo.query()))
        assert [type(h).fieldtype for h in first] == [type(h).fieldtype for h in second]
        assert all(a is b for a, b in zip(first, second))


class ContextRecordingHydrator(AbstractHydrator):
    fieldtype = "assets"
    seen: list[dict] = []

    def __init__(self, session):
        self.session = session

    def hydrate(self, collection):
        ContextRecordingHydrator.seen.append(structlog.contextvars.get_contextvars())


class TestFetchLogContext:
    @pytest.fixture(autouse=True)
    def _reset(self):
        clear_context()
        ContextRecordingHydrator.seen = []
        yield
        clear_context()

    def test_entry_count_is_bound_during_hydration(self, session):
        repo = EntryRepository(session, hydrators={"assets": ContextRecordingHydrator})
        repo.fetch(repo.query().channel_name("blog"))
        assert ContextRecordingHydrator.seen == [{"entry_count": 3}]
        assert structlog.contextvars.get_contextvars() == {}

    def test_outer_context_is_kept(self, session):
        repo = EntryRepository(session, hydrators={"assets": ContextRecordingHydrator})
        structlog.contextvars.bind_contextvars(request_id="r1")
        repo.fetch(repo.query().entry_id(1))
        assert ContextRecordingHydrator.seen == [{"request_id": "r1", "entry_count": 1}]
        assert structlog.contextvars.get_contextvars() == {"request_id": "r1"}
