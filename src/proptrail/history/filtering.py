"""Predicates, ordering and paging shared by the timeline and search engines.

All filters compose conjunctively; an empty list / ``None`` field places no
constraint. Tag filters admit an event when *any* tag overlaps.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

from proptrail.core.contracts.events import EventImportance, HistoryEvent, HistoryEventType
from proptrail.core.contracts.requests import DateRange

from .classifier import importance_of

T = TypeVar("T")


def matches(
    event: HistoryEvent,
    *,
    event_types: Sequence[HistoryEventType] = (),
    date_range: DateRange | None = None,
    sources: Sequence[str] = (),
    importance: Sequence[EventImportance] = (),
    tags: Sequence[str] = (),
    is_public: bool | None = None,
) -> bool:
    """Return ``True`` when ``event`` satisfies every supplied constraint."""
    if event_types and event.type not in event_types:
        return False
    if date_range is not None and not date_range.contains(event.timestamp):
        return False
    if sources and event.source.type not in sources:
        return False
    if importance and importance_of(event.type) not in importance:
        return False
    if tags and not set(tags).intersection(event.tags):
        return False
    if is_public is not None and event.is_public is not is_public:
        return False
    return True


def newest_first(events: Iterable[HistoryEvent]) -> list[HistoryEvent]:
    """Sort by timestamp descending; ``sorted`` is stable so ties keep store order."""
    return sorted(events, key=lambda e: e.timestamp, reverse=True)


def paginate(items: Sequence[T], page: int, limit: int) -> tuple[list[T], bool]:
    """Return the 1-based ``page`` of ``items`` and whether more items follow."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if limit < 1:
        raise ValueError("limit must be >= 1")
    start = (page - 1) * limit
    return list(items[start : start + limit]), page * limit < len(items)


__all__ = ["matches", "newest_first", "paginate"]
