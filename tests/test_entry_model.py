"""Tests for the Entry record, date conversion and EntryCollection."""

from __future__ import annotations

import datetime

import pytest

from deep.errors import NotSupportedError, RelationNotLoadedError, UnknownFieldError
from deep.hydrators.base import AbstractHydrator
from deep.models import Channel, ChannelField, Entry, EntryCollection
from deep.models.entry import epoch_to_datetime, optional_epoch_to_datetime, packed_to_datetime

UTC = datetime.timezone.utc


@pytest.fixture
def blog() -> Channel:
    return Channel(
        channel_id=1,
        channel_name="blog",
        field_group=1,
        fields=[
            ChannelField(field_id=3, group_id=1, field_name="body", field_type="textarea"),
            ChannelField(field_id=4, group_id=1, field_name="images", field_type="assets"),
        ],
    )


@pytest.fixture
def entry(blog) -> Entry:
    return Entry(
        {
            "entry_id": 1,
            "channel_id": 1,
            "title": "Hello",
            "entry_date": 0,
            "expiration_date": 1_700_000_000,
            "comment_expiration_date": 0,
            "recent_comment_date": None,
            "edit_date": 20231114221320,
            "field_id_3": "Body text",
            "field_id_4": None,
        },
        blog,
    )


class TestFieldResolution:
    def test_field_by_name(self, entry):
        assert entry.get("body") == "Body text"
        assert entry["body"] == "Body text"

    def test_resolved_value_is_memoized(self, entry):
        assert entry.get("body") == "Body text"
        entry.attributes["field_id_3"] = "changed"
        assert entry.get("body") == "Body text"
        assert entry.attributes["body"] == "Body text"

    def test_columns_win_over_fields(self, entry):
        assert entry.get("title") == "Hello"

    def test_unknown_name_falls_back_to_default(self, entry):
        assert entry.get("nope") is None
        assert entry.get("nope", "x") == "x"

    def test_contains(self, entry):
        assert "body" in entry
        assert "field_id_3" in entry
        assert "nope" not in entry

    def test_strict_field_accessor(self, entry):
        assert entry.field("body") == "Body text"
        with pytest.raises(UnknownFieldError):
            entry.field("nope")

    def test_field_definition(self, entry):
        assert entry.field_definition("images").field_type == "assets"

    def test_set_attribute_overrides(self, entry):
        entry.set_attribute("images", ["a.jpg"])
        assert entry.get("images") == ["a.jpg"]


class TestMissingChannel:
    def test_get_falls_through(self):
        entry = Entry({"entry_id": 9, "channel_id": 1, "field_id_3": "x"})
        assert entry.get("body") is None
        assert not entry.has_channel

    def test_channel_raises(self):
        entry = Entry({"entry_id": 9, "channel_id": 1})
        with pytest.raises(RelationNotLoadedError) as exc_info:
            entry.channel
        assert exc_info.value.relation == "channel"
        assert exc_info.value.context.metadata["entry_id"] == 9

    def test_field_raises(self):
        with pytest.raises(RelationNotLoadedError):
            Entry({"entry_id": 9, "channel_id": 1}).field("body")

    def test_channel_fields_not_loaded(self):
        entry = Entry({"entry_id": 9, "channel_id": 1, "field_id_3": "x"}, Channel(channel_id=1, channel_name="blog"))
        assert entry.get("body") is None
        with pytest.raises(RelationNotLoadedError):
            entry.field("body")


class TestDates:
    def test_entry_date_zero_is_epoch(self, entry):
        assert entry.entry_date == datetime.datetime(1970, 1, 1, tzinfo=UTC)

    def test_expiration_date(self, entry):
        assert entry.expiration_date == datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)

    def test_nullable_dates_are_none(self, entry):
        assert entry.comment_expiration_date is None
        assert entry.recent_comment_date is None

    def test_edit_date_is_packed(self, entry):
        assert entry.edit_date == datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)

    def test_get_converts_dates(self, entry):
        assert entry.get("entry_date").tzinfo is UTC
        assert entry.attributes["entry_date"] == 0

    @pytest.mark.parametrize("value", [None, "", 0, "0"])
    def test_optional_converters(self, value):
        assert optional_epoch_to_datetime(value) is None
        assert packed_to_datetime(value) is None

    def test_epoch_accepts_strings(self):
        assert epoch_to_datetime("86400") == datetime.datetime(1970, 1, 2, tzinfo=UTC)
        assert epoch_to_datetime(None) is None


class TestPersistence:
    def test_save_not_supported(self, entry):
        with pytest.raises(NotSupportedError, match="Saving is not supported") as exc_info:
            entry.save()
        assert exc_info.value.context.model == "Entry"

    def test_equality_by_entry_id(self, entry):
        same = Entry({"entry_id": 1, "channel_id": 2})
        assert entry == same
        assert hash(entry) == hash(same)
        assert entry != Entry({"entry_id": 2, "channel_id": 1})

    def test_to_dict_is_a_copy(self, entry):
        data = entry.to_dict()
        data["title"] = "changed"
        assert entry.title == "Hello"

    def test_repr(self, entry):
        assert repr(entry) == "<Entry entry_id=1 'Hello'>"


class RecordingHydrator(AbstractHydrator):
    def __init__(self, name: str, calls: list[str]) -> None:
        self.name = name
        self.calls = calls

    def preload(self, collection):
        self.calls.append(f"{self.name}.preload")

    def hydrate(self, collection):
        self.calls.append(f"{self.name}.hydrate")


class TestEntryCollection:
    @pytest.fixture
    def collection(self, blog) -> EntryCollection:
        news = Channel(channel_id=2, channel_name="news", field_group=2, fields=[])
        return EntryCollection([
            Entry({"entry_id": 1, "channel_id": 1}, blog),
            Entry({"entry_id": 2, "channel_id": 1}, blog),
            Entry({"entry_id": 3, "channel_id": 2}, news),
        ])

    def test_entry_ids(self, collection):
        assert collection.entry_ids() == [1, 2, 3]

    def test_channels_are_distinct(self, collection):
        assert [channel.channel_name for channel in collection.channels()] == ["blog", "news"]
        assert collection.channel_ids() == [1, 2]

    def test_fields_of_type(self, collection):
        assert [field.field_name for field in collection.fields_of_type("assets")] == ["images"]
        assert collection.fields_of_type("matrix") == []

    def test_field_types(self, collection):
        assert collection.field_types() == {"textarea", "assets"}

    def test_find(self, collection):
        assert collection.find(3).channel_id == 2
        assert collection.find(99) is None

    def test_hydrate_preloads_everything_first(self, collection):
        calls: list[str] = []
        result = collection.hydrate([RecordingHydrator("a", calls), RecordingHydrator("b", calls)])
        assert result is collection
        assert calls == ["a.preload", "b.preload", "a.hydrate", "b.hydrate"]
