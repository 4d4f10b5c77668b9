"""
Shared pytest fixtures for deep tests.

Every test gets a fresh in-memory SQLite database with the CMS tables,
the per-installation ``field_id_<n>`` / ``col_id_<n>`` columns and a small
seeded site:

channels
    1 blog  (field group 1: body, summary, images, gallery, category)
    2 news  (field group 2: headline)
    3 pages (no field group)

entries (``NOW`` = 1_700_000_000, 2023-11-14 22:13:20 UTC)
    1 blog  ann  "First post"   open    entry_date NOW-3000
    2 blog  bob  "Second post"  open    sticky, expired at NOW-100
    3 blog  ann  "Draft post"   closed  expires NOW+1000
    4 news  bob  "Breaking"     open    future (NOW+5000)
    5 news  ann  "Old news"     open    entry_date 0
"""

from __future__ import annotations

from typing import Any, Iterator

import pytest
from sqlalchemy import MetaData, Table, insert, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from deep.models import (
    Asset,
    AssetSelection,
    Channel,
    ChannelField,
    ChannelTitle,
    Fieldtype,
    MatrixCol,
    Member,
    UploadPref,
)
from deep.orm import DeepBase, DeepSession, create_deep_engine
from deep.repositories import EntryRepository

NOW = 1_700_000_000

FIELD_IDS = range(1, 7)
MATRIX_COL_IDS = range(1, 3)


def _entry(entry_id: int, channel_id: int, author_id: int, title: str, **kwargs: Any) -> ChannelTitle:
    values: dict[str, Any] = {
        "entry_id": entry_id,
        "channel_id": channel_id,
        "author_id": author_id,
        "title": title,
        "url_title": title.lower().replace(" ", "-"),
        "year": "2023",
        "month": "11",
        "day": "14",
    }
    values.update(kwargs)
    return ChannelTitle(**values)


def _channel_data_row(entry_id: int, channel_id: int, **fields: Any) -> dict[str, Any]:
    row: dict[str, Any] = {"entry_id": entry_id, "site_id": 1, "channel_id": channel_id}
    for field_id in FIELD_IDS:
        row[f"field_id_{field_id}"] = fields.get(f"field_id_{field_id}")
    return row


def _matrix_row(row_id: int, entry_id: int, row_order: int, caption: str, credit: str, *, is_draft: int = 0) -> dict[str, Any]:
    return {
        "row_id": row_id,
        "site_id": 1,
        "entry_id": entry_id,
        "field_id": 4,
        "var_id": None,
        "is_draft": is_draft,
        "row_order": row_order,
        "col_id_1": caption,
        "col_id_2": credit,
    }


def seed(engine: Engine) -> None:
    """Create the schema and insert the fixture site."""
    DeepBase.metadata.create_all(engine)

    with engine.begin() as conn:
        for field_id in FIELD_IDS:
            conn.execute(text(f"ALTER TABLE channel_data ADD COLUMN field_id_{field_id} TEXT"))
        for col_id in MATRIX_COL_IDS:
            conn.execute(text(f"ALTER TABLE matrix_data ADD COLUMN col_id_{col_id} TEXT"))

    with DeepSession(bind=engine) as session:
        session.add_all([
            UploadPref(id=1, name="Uploads", url="https://example.com/uploads/", server_path="/var/www/uploads/"),
            Fieldtype(fieldtype_id=1, name="text", version="1.0"),
            Fieldtype(fieldtype_id=2, name="textarea", version="1.0"),
            Fieldtype(fieldtype_id=3, name="assets", version="2.1"),
            Fieldtype(fieldtype_id=4, name="matrix", version="2.5"),
            Fieldtype(fieldtype_id=5, name="select", version="1.0"),
            Member(member_id=1, group_id=1, username="ann", screen_name="Ann"),
            Member(member_id=2, group_id=5, username="bob", screen_name="Bob"),
            Channel(channel_id=1, channel_name="blog", channel_title="Blog", field_group=1),
            Channel(channel_id=2, channel_name="news", channel_title="News", field_group=2),
            Channel(channel_id=3, channel_name="pages", channel_title="Pages", field_group=None),
            ChannelField(field_id=1, group_id=1, field_name="body", field_type="textarea", field_order=1),
            ChannelField(field_id=2, group_id=1, field_name="summary", field_type="text", field_order=2),
            ChannelField(field_id=3, group_id=1, field_name="images", field_type="assets", field_order=3),
            ChannelField(field_id=4, group_id=1, field_name="gallery", field_type="matrix", field_order=4),
            ChannelField(
                field_id=5, group_id=1, field_name="category", field_type="select",
                field_list_items="news\nreviews", field_order=5,
            ),
            ChannelField(field_id=6, group_id=2, field_name="headline", field_type="text", field_order=1),
            MatrixCol(col_id=1, field_id=4, col_name="caption", col_label="Caption", col_order=1),
            MatrixCol(col_id=2, field_id=4, col_name="credit", col_label="Credit", col_order=2),
            Asset(file_id=1, filedir_id=1, file_name="photo.jpg", kind="image"),
            Asset(file_id=2, filedir_id=1, file_name="diagram.png", kind="image"),
            Asset(file_id=3, filedir_id=None, file_name="orphan.txt", kind="document"),
        ])
        session.flush()
        session.add_all([
            _entry(1, 1, 1, "First post", entry_date=NOW - 3000, edit_date=20231114221320),
            _entry(2, 1, 2, "Second post", sticky="y", entry_date=NOW - 2000, expiration_date=NOW - 100),
            _entry(3, 1, 1, "Draft post", status="closed", entry_date=NOW - 1000, expiration_date=NOW + 1000),
            _entry(4, 2, 2, "Breaking", entry_date=NOW + 5000, month="12", day="01"),
            _entry(5, 2, 1, "Old news", entry_date=0, recent_comment_date=0, year="1970", month="01", day="01"),
            AssetSelection(file_id=1, entry_id=1, field_id=3, sort_order=2),
            AssetSelection(file_id=2, entry_id=1, field_id=3, sort_order=1),
            AssetSelection(file_id=1, entry_id=2, field_id=3, sort_order=1),
            AssetSelection(file_id=2, entry_id=1, field_id=4, col_id=1, row_id=1, sort_order=1),
            AssetSelection(file_id=2, entry_id=3, field_id=3, sort_order=1, is_draft=1),
        ])
        session.commit()

    with engine.begin() as conn:
        channel_data = Table("channel_data", MetaData(), autoload_with=conn)
        conn.execute(insert(channel_data), [
            _channel_data_row(1, 1, field_id_1="Hello world body", field_id_2="Summary one", field_id_5="news"),
            _channel_data_row(2, 1, field_id_1="Another body about cats", field_id_2="Summary 100% two"),
            _channel_data_row(3, 1, field_id_1="Draft body"),
            _channel_data_row(4, 2, field_id_6="Breaking headline"),
            _channel_data_row(5, 2, field_id_6="Old headline"),
        ])
        matrix_data = Table("matrix_data", MetaData(), autoload_with=conn)
        conn.execute(insert(matrix_data), [
            _matrix_row(1, 1, 2, "Second caption", "Bob"),
            _matrix_row(2, 1, 1, "First caption", "Ann"),
            _matrix_row(3, 1, 3, "Draft caption", "Ann", is_draft=1),
        ])


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine() -> Iterator[Engine]:
    """Seeded in-memory SQLite engine (one shared connection)."""
    eng = create_deep_engine("sqlite:///:memory:", poolclass=StaticPool)
    seed(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine: Engine) -> Iterator[DeepSession]:
    """Fresh session; nothing from seeding is in its identity map."""
    with DeepSession(bind=engine) as sess:
        yield sess


@pytest.fixture
def repo(session: DeepSession) -> EntryRepository:
    return EntryRepository(session)


@pytest.fixture
def now() -> int:
    return NOW

