"""Tests for the injectable clocks."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from proptrail.core.clock import FixedClock, SystemClock, ensure_utc


def test_fixed_clock_is_frozen_until_moved() -> None:
    start = datetime(2024, 1, 1, tzinfo=UTC)
    clock = FixedClock(start)

    assert clock.now() == start
    assert clock.now() == start

    assert clock.advance(timedelta(hours=2)) == start + timedelta(hours=2)
    clock.set(datetime(2025, 1, 1))
    assert clock.now() == datetime(2025, 1, 1, tzinfo=UTC)


def test_system_clock_is_aware_utc() -> None:
    assert SystemClock().now().tzinfo is not None
    assert SystemClock().now().utcoffset() == timedelta(0)


def test_ensure_utc_converts_offsets_and_naive_values() -> None:
    plus_two = timezone(timedelta(hours=2))
    assert ensure_utc(datetime(2024, 1, 1, 12, tzinfo=plus_two)) == datetime(
        2024, 1, 1, 10, tzinfo=UTC
    )
    assert ensure_utc(datetime(2024, 1, 1, 12)).tzinfo is UTC
