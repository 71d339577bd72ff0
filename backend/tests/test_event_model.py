"""
EventDesk Backend — Event Document Model Unit Tests
=====================================================

What:  Tests for defaulting, coercion and encoding rules in models/event.py.

What we test:
    ✅ Leading-integer parsing (rigor_rank, limit, page)
    ✅ Date coercion from ISO strings, epoch milliseconds and datetimes
    ✅ Create-document defaults and server-set fields
    ✅ Update set: protected keys dropped, coercions, updatedAt
    ✅ int64 bounds on parsed integers
    ✅ Millisecond ISO-8601 encoding
"""

from datetime import datetime, timedelta, timezone

import pytest

from eventdesk.models.event import (
    EVENT_TYPE,
    coerce_date,
    isoformat_ms,
    new_event_document,
    parse_int,
    update_fields,
)

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestParseInt:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("5", 5),
            ("  12", 12),
            ("-3", -3),
            ("7abc", 7),
            ("2.9", 2),
            (9, 9),
            (4.7, 4),
        ],
    )
    def test_parses_leading_integer(self, raw, expected):
        assert parse_int(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "x1", None, True, [], {}, float("nan")])
    def test_unparseable_returns_none(self, raw):
        assert parse_int(raw) is None

    def test_int64_bounds(self):
        assert parse_int(str(2**63 - 1)) == 2**63 - 1
        assert parse_int(str(-(2**63))) == -(2**63)

    @pytest.mark.parametrize("raw", ["100000000000000000000", 2**63, -(2**63) - 1, 1e20])
    def test_beyond_int64_returns_none(self, raw):
        assert parse_int(raw) is None


class TestCoerceDate:

    def test_iso_string_with_z(self):
        assert coerce_date("2024-03-01T18:30:00Z") == datetime(
            2024, 3, 1, 18, 30, tzinfo=timezone.utc
        )

    def test_offset_is_normalized_to_utc(self):
        result = coerce_date("2024-03-01T20:30:00+02:00")
        assert result == datetime(2024, 3, 1, 18, 30, tzinfo=timezone.utc)
        assert result.utcoffset() == timedelta(0)

    def test_date_only_is_midnight_utc(self):
        assert coerce_date("2024-03-01") == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_naive_datetime_is_treated_as_utc(self):
        assert coerce_date(datetime(2024, 3, 1, 9)) == datetime(
            2024, 3, 1, 9, tzinfo=timezone.utc
        )

    def test_epoch_milliseconds(self):
        assert coerce_date(86_400_000) == datetime(1970, 1, 2, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", ["not a date", "", None, True, ["2024-01-01"]])
    def test_unparseable_returns_none(self, raw):
        assert coerce_date(raw) is None


class TestNewEventDocument:

    def test_name_only_gets_all_defaults(self):
        doc = new_event_document({"name": "X"}, now=NOW)

        assert doc == {
            "type": EVENT_TYPE,
            "uid": None,
            "name": "X",
            "tagline": "",
            "schedule": NOW,
            "description": "",
            "files": {"image": None},
            "moderator": None,
            "category": "",
            "sub_category": "",
            "rigor_rank": 0,
            "attendees": [],
            "createdAt": NOW,
            "updatedAt": NOW,
        }

    def test_coerces_schedule_and_rigor_rank(self, sample_event_payload):
        doc = new_event_document(sample_event_payload, now=NOW)

        assert doc["schedule"] == datetime(2024, 3, 1, 18, 30, tzinfo=timezone.utc)
        assert doc["rigor_rank"] == 4
        assert doc["attendees"] == ["user-1", "user-2"]
        assert doc["files"] == {"image": "https://cdn.example.com/graph.png"}

    def test_non_list_attendees_are_discarded(self):
        doc = new_event_document({"name": "X", "attendees": "user-1"}, now=NOW)
        assert doc["attendees"] == []

    def test_empty_files_object_is_kept(self):
        doc = new_event_document({"name": "X", "files": {}}, now=NOW)
        assert doc["files"] == {}

    def test_unparseable_rigor_rank_is_stored_as_null(self):
        doc = new_event_document({"name": "X", "rigor_rank": "high"}, now=NOW)
        assert doc["rigor_rank"] is None

    def test_client_cannot_set_server_fields(self):
        doc = new_event_document(
            {"name": "X", "type": "party", "createdAt": "1999-01-01"}, now=NOW
        )
        assert doc["type"] == "event"
        assert doc["createdAt"] == NOW


class TestUpdateFields:

    def test_drops_protected_keys_and_sets_updated_at(self):
        fields = update_fields({"_id": "abc", "type": "party", "name": "New"}, now=NOW)
        assert fields == {"name": "New", "updatedAt": NOW}

    def test_coerces_present_values(self):
        fields = update_fields({"schedule": "2024-05-05", "rigor_rank": "8"}, now=NOW)
        assert fields["schedule"] == datetime(2024, 5, 5, tzinfo=timezone.utc)
        assert fields["rigor_rank"] == 8

    def test_null_rigor_rank_stays_null(self):
        assert update_fields({"rigor_rank": None}, now=NOW)["rigor_rank"] is None

    def test_unknown_keys_are_carried_through(self):
        fields = update_fields({"venue": "Hall B"}, now=NOW)
        assert fields["venue"] == "Hall B"

    @pytest.mark.parametrize("raw", ["user-1", None, {"id": "user-1"}, 3])
    def test_non_list_attendees_become_empty(self, raw):
        assert update_fields({"attendees": raw}, now=NOW)["attendees"] == []

    def test_list_attendees_are_kept(self):
        fields = update_fields({"attendees": ["user-3"]}, now=NOW)
        assert fields["attendees"] == ["user-3"]

    def test_oversized_rigor_rank_is_null(self):
        assert update_fields({"rigor_rank": 10**20}, now=NOW)["rigor_rank"] is None


def test_isoformat_ms():
    value = datetime(2024, 1, 15, 12, 0, 0, 123456, tzinfo=timezone.utc)
    assert isoformat_ms(value) == "2024-01-15T12:00:00.123Z"
    assert isoformat_ms(datetime(2024, 1, 15)) == "2024-01-15T00:00:00.000Z"
