"""Timestamp parsing for store values."""

from datetime import datetime, timedelta, timezone

from unshared_api.utils.timestamps import is_expired, parse_timestamp


def test_parse_timestamp_variants():
    expected = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)
    assert parse_timestamp("2026-01-05T10:00:00+00:00") == expected
    assert parse_timestamp("2026-01-05T10:00:00Z") == expected
    assert parse_timestamp("2026-01-05T10:00:00") == expected
    assert parse_timestamp(expected) is expected
    assert parse_timestamp(None) is None


def test_is_expired_is_strict():
    now = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)
    assert is_expired(now.isoformat(), now=now) is False
    assert is_expired((now - timedelta(seconds=1)).isoformat(), now=now) is True
    assert is_expired((now + timedelta(days=7)).isoformat(), now=now) is False
    assert is_expired(None, now=now) is False
