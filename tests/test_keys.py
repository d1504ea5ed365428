"""Tests for the food record key scheme."""

from datetime import date

import pytest

from macro_tracker.domain.errors import InvalidDateFormatError, InvalidRecordKeyError
from macro_tracker.domain.keys import (
    FoodRecordKey,
    build_day_prefix,
    build_record_key,
    parse_date,
    parse_record_date,
    parse_record_key,
)


def test_build_day_prefix_appends_separator() -> None:
    assert build_day_prefix("2025-01-01") == "2025-01-01#"


@pytest.mark.parametrize(
    "value", ["2025-1-01", "20250101", "2025-01-01T00:00", "", "2025-02-30"]
)
def test_build_day_prefix_rejects_bad_dates(value: str) -> None:
    with pytest.raises(InvalidDateFormatError):
        build_day_prefix(value)


def test_build_record_key_concatenates_segments() -> None:
    key = build_record_key("2025-01-01", 1735725600000, "abc-123")

    assert key == "2025-01-01#1735725600000#abc-123"


def test_keys_sort_by_date_then_time() -> None:
    keys = [
        build_record_key("2025-01-02", 1735800000000, "b"),
        build_record_key("2025-01-01", 1735790000000, "z"),
        build_record_key("2025-01-01", 1735720000000, "a"),
    ]

    assert sorted(keys) == [keys[2], keys[1], keys[0]]


def test_same_millisecond_keys_stay_unique() -> None:
    first = build_record_key("2025-01-01", 1735725600000, "id-1")
    second = build_record_key("2025-01-01", 1735725600000, "id-2")

    assert first != second


def test_parse_record_date_reads_first_segment() -> None:
    assert parse_record_date("2025-03-04#1#x") == date(2025, 3, 4)


def test_parse_record_date_rejects_garbage() -> None:
    with pytest.raises(InvalidDateFormatError):
        parse_record_date("not-a-key")


def test_parse_record_key_round_trips_through_encode() -> None:
    key = "2025-01-01#1735725600000#abc-123"

    parsed = parse_record_key(key)

    assert parsed == FoodRecordKey(
        day=date(2025, 1, 1), timestamp=1735725600000, record_id="abc-123"
    )
    assert parsed.encode() == key


@pytest.mark.parametrize(
    "key", ["2025-01-01", "2025-01-01#abc#id", "2025-01-01#123#", "bad#1#id"]
)
def test_parse_record_key_rejects_malformed(key: str) -> None:
    with pytest.raises(InvalidRecordKeyError):
        parse_record_key(key)


def test_parse_date_returns_calendar_day() -> None:
    assert parse_date("2024-02-29") == date(2024, 2, 29)
