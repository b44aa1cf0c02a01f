"""Tests for UTC datetime helpers."""

from datetime import UTC, datetime, timedelta, timezone

from omni.shared.utils import ensure_utc, seconds_until, utc_now


def test_utc_now_is_aware() -> None:
    assert utc_now().tzinfo is UTC


def test_ensure_utc_naive_and_aware() -> None:
    naive = datetime(2026, 1, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    plus_two = datetime(2026, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(plus_two) == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    assert ensure_utc(None) is None


def test_seconds_until_rounds_down_and_goes_negative() -> None:
    now = datetime(2026, 1, 1, tzinfo=UTC)
    assert seconds_until(now + timedelta(seconds=90, milliseconds=900), now) == 90
    assert seconds_until(now, now) == 0
    assert seconds_until(now - timedelta(seconds=1), now) == -1
