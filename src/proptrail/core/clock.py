"""
Injectable clocks.

Every "now" the engine needs (creation timestamps, days-on-market for an
unsold listing, the date-range facet buckets, the recent-activity insight,
the empty-timeline date span) is read through a :class:`Clock` so that tests
and replays can pin time instead of reading the wall clock implicitly.

- :class:`SystemClock` returns the current UTC time.
- :class:`FixedClock` returns a settable instant and can be advanced.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current (timezone-aware) time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """A clock frozen at ``instant`` until explicitly moved.

    Naive datetimes are interpreted as UTC.
    """

    def __init__(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward by ``delta`` and return the new instant."""
        self._instant = self._instant + delta
        return self._instant


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are assumed UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


__all__ = ["Clock", "SystemClock", "FixedClock", "ensure_utc"]
