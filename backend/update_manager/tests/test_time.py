"""Tests for timestamp helpers."""

from datetime import UTC, datetime, timedelta, timezone

from update_manager.core.time import parse_timestamp, utcnow


def test_utcnow_is_aware():
    assert utcnow().tzinfo is not None


def test_parse_iso_with_z_suffix():
    parsed = parse_timestamp("2024-05-01T10:30:00Z")
    assert parsed == datetime(2024, 5, 1, 10, 30, tzinfo=UTC)


def test_parse_converts_offsets_to_utc():
    parsed = parse_timestamp("2024-05-01T12:30:00+02:00")
    assert parsed == datetime(2024, 5, 1, 10, 30, tzinfo=UTC)


def test_parse_naive_is_assumed_utc():
    parsed = parse_timestamp("2024-05-01 08:00:00")
    assert parsed.tzinfo is not None
    assert parsed.hour == 8


def test_parse_windows_formats():
    assert parse_timestamp("05/01/2024") == datetime(2024, 5, 1, tzinfo=UTC)
    assert parse_timestamp("05/01/2024 14:05:00") == datetime(2024, 5, 1, 14, 5, tzinfo=UTC)
    assert parse_timestamp("05/01/2024 2:05:00 PM") == datetime(2024, 5, 1, 14, 5, tzinfo=UTC)


def test_parse_passes_datetimes_through():
    value = datetime(2024, 5, 1, 10, 0, tzinfo=timezone(timedelta(hours=1)))
    assert parse_timestamp(value) == datetime(2024, 5, 1, 9, 0, tzinfo=UTC)


def test_parse_rejects_garbage():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("   ") is None
    assert parse_timestamp("not a date") is None


def test_parse_out_of_range_offsets_return_none():
    assert parse_timestamp("9999-12-31T23:00:00-05:00") is None
    assert parse_timestamp("0001-01-01T00:00:00+01:00") is None


def test_parse_keeps_edge_values_that_fit():
    assert parse_timestamp("9999-12-31T23:00:00Z") == datetime(9999, 12, 31, 23, 0, tzinfo=UTC)
