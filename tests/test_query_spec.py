"""Tests for the immutable QuerySpec and join registry."""

from __future__ import annotations

import pytest
from sqlalchemy import Column, Integer, MetaData, Table, Text

from deep.query.spec import JoinDef, QuerySpec, as_list, join_registry

metadata = MetaData()
posts = Table("posts", metadata, Column("id", Integer, primary_key=True), Column("author_id", Integer), Column("pinned", Text))
authors = Table("authors", metadata, Column("id", Integer, primary_key=True), Column("name", Text))


def _sql(spec: QuerySpec) -> str:
    return str(spec.to_select().compile(compile_kwargs={"literal_binds": True}))


@pytest.fixture
def spec() -> QuerySpec:
    return QuerySpec(
        source=posts,
        columns=(posts.c.id,),
        joins=join_registry({"authors": JoinDef(authors, authors.c.id == posts.c.author_id)}),
    )


class TestAsList:
    def test_scalar(self):
        assert as_list(5) == [5]

    def test_string_is_not_split(self):
        assert as_list("open") == ["open"]

    def test_iterables(self):
        assert as_list((1, 2)) == [1, 2]
        assert as_list({3}) == [3]


class TestJoinRegistry:
    def test_registry_is_read_only(self):
        registry = join_registry({})
        with pytest.raises(TypeError):
            registry["authors"] = JoinDef(authors, authors.c.id == posts.c.author_id)  # type: ignore[index]


class TestQuerySpec:
    def test_where_returns_new_spec(self, spec):
        narrowed = spec.where(posts.c.id > 1)
        assert narrowed is not spec
        assert spec.predicates == ()
        assert len(narrowed.predicates) == 1

    def test_require_table_applies_join_once(self, spec):
        joined = spec.require_table("authors").require_table("authors")
        assert joined.joined == ("authors",)
        assert _sql(joined).count("JOIN authors") == 1

    def test_require_unknown_table_is_noop(self, spec):
        assert spec.require_table("comments") is spec
        assert not spec.has_join("comments")

    def test_has_join(self, spec):
        assert not spec.has_join("authors")
        assert spec.require_table("authors").has_join("authors")

    def test_prepend_order_stays_first(self, spec):
        ordered = spec.prepend_order(posts.c.pinned.desc()).order_by(posts.c.id.asc())
        assert "ORDER BY posts.pinned DESC, posts.id ASC" in _sql(ordered)

    def test_order_by_appends(self, spec):
        ordered = spec.order_by(posts.c.author_id.asc()).order_by(posts.c.id.desc())
        assert "ORDER BY posts.author_id ASC, posts.id DESC" in _sql(ordered)

    def test_limit_and_offset(self, spec):
        paged = spec.with_limit(5).with_offset(10)
        assert (paged.limit, paged.offset) == (5, 10)
        assert (spec.limit, spec.offset) == (None, None)

    def test_with_columns(self, spec):
        wider = spec.with_columns(posts.c.id, posts.c.pinned)
        assert "posts.pinned" in _sql(wider)
        assert "posts.pinned" not in _sql(spec)

    def test_shared_base_is_not_affected(self, spec):
        base = spec.require_table("authors")
        first = base.where(authors.c.name == "ann")
        second = base.where(authors.c.name == "bob")
        assert "'ann'" in _sql(first)
        assert "'ann'" not in _sql(second)
        assert base.predicates == ()
