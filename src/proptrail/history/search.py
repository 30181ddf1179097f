"""Cross-property keyword and structured search with facet counts."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from proptrail.core.contracts.events import HistoryEvent
from proptrail.core.contracts.requests import HistorySearchQuery
from proptrail.core.contracts.search import DATE_BUCKETS, HistorySearchResponse, SearchFacets

from .filtering import matches, newest_first, paginate

#: Upper age bound of each date bucket, evaluated in order; the last bucket is open.
_BUCKET_WINDOWS: tuple[tuple[str, timedelta], ...] = (
    (DATE_BUCKETS[0], timedelta(days=7)),
    (DATE_BUCKETS[1], timedelta(days=30)),
    (DATE_BUCKETS[2], timedelta(days=90)),
)


def keyword_match(event: HistoryEvent, keywords: str | None) -> bool:
    """Case-insensitive substring match against title OR description."""
    if not keywords:
        return True
    needle = keywords.lower()
    return needle in event.title.lower() or needle in event.description.lower()


def date_bucket(timestamp: datetime, now: datetime) -> str:
    """Name the first bucket whose window contains ``timestamp``."""
    age = now - timestamp
    for name, window in _BUCKET_WINDOWS:
        if age <= window:
            return name
    return DATE_BUCKETS[-1]


def build_facets(events: Iterable[HistoryEvent], now: datetime) -> SearchFacets:
    types: Counter[str] = Counter()
    sources: Counter[str] = Counter()
    dates: Counter[str] = Counter()
    for event in events:
        types[event.type.value] += 1
        sources[event.source.type] += 1
        dates[date_bucket(event.timestamp, now)] += 1
    return SearchFacets(event_types=dict(types), sources=dict(sources), date_ranges=dict(dates))


def search(
    events: Sequence[HistoryEvent],
    query: HistorySearchQuery,
    page: int = 1,
    limit: int = 20,
    *,
    now: datetime,
) -> HistorySearchResponse:
    """Filter ``events`` by ``query``, sort newest first, page, and facet."""
    filtered = [
        e
        for e in events
        if (query.property_id is None or e.property_id == query.property_id)
        and matches(
            e,
            event_types=query.event_types,
            date_range=query.date_range,
            sources=query.sources,
            importance=query.importance,
            tags=query.tags,
        )
        and keyword_match(e, query.keywords)
    ]
    ordered = newest_first(filtered)
    page_items, has_more = paginate(ordered, page, limit)

    return HistorySearchResponse(
        events=page_items,
        total=len(ordered),
        page=page,
        limit=limit,
        has_more=has_more,
        facets=build_facets(ordered, now),
    )


__all__ = ["keyword_match", "date_bucket", "build_facets", "search"]
