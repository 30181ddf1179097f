"""
Timeline builder: filter → sort → paginate → decorate → summarize.

Pipeline
--------
1. Keep the property's events that pass every filter in
   :class:`TimelineFilters` (AND semantics).
2. Sort newest first (stable for equal timestamps).
3. Cut the requested 1-based page; ``limit=None`` returns the whole set.
4. Decorate page items with ``display_order``, category, importance and
   related-event ids.
5. Summarize the *full* filtered set (not the page).

Related events
--------------
:func:`related_event_ids` scans the filtered set once per decorated event,
so decorating a page costs O(page × filtered). That is fine for listing-
sized histories; if per-property volume grows large, index the filtered set
by type and by UTC day and probe only the matching buckets.

An unknown property simply yields an empty timeline.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta

from proptrail.core.contracts.events import HistoryEvent, HistoryEventType
from proptrail.core.contracts.requests import TimelineFilters
from proptrail.core.contracts.timeline import (
    PropertyTimeline,
    TimelineDateRange,
    TimelineEvent,
    TimelinePagination,
    TimelineSummary,
)

from .classifier import category_of, importance_of
from .filtering import matches, newest_first, paginate

RELATED_WINDOW = timedelta(days=1)
MAX_RELATED = 5
MAX_MILESTONES = 5
MAX_RECENT = 10

MILESTONE_TYPES: frozenset[HistoryEventType] = frozenset(
    {HistoryEventType.SOLD, HistoryEventType.LISTED, HistoryEventType.PRICE_CHANGE}
)


def apply_filters(events: Sequence[HistoryEvent], filters: TimelineFilters) -> list[HistoryEvent]:
    """Return the events that satisfy all of ``filters``, in input order."""
    return [
        e
        for e in events
        if matches(
            e,
            event_types=filters.event_types,
            date_range=filters.date_range,
            sources=filters.sources,
            importance=filters.importance,
            tags=filters.tags,
            is_public=filters.is_public,
        )
    ]


def related_event_ids(
    event: HistoryEvent,
    candidates: Sequence[HistoryEvent],
    *,
    window: timedelta = RELATED_WINDOW,
    limit: int = MAX_RELATED,
) -> list[str]:
    """Ids of other candidates sharing ``event``'s type or within ``window`` of it."""
    related: list[str] = []
    for other in candidates:
        if other.id == event.id:
            continue
        if other.type == event.type or abs(other.timestamp - event.timestamp) <= window:
            related.append(other.id)
            if len(related) == limit:
                break
    return related


def decorate(
    event: HistoryEvent, display_order: int, universe: Sequence[HistoryEvent]
) -> TimelineEvent:
    """Wrap ``event`` as a :class:`TimelineEvent`."""
    return TimelineEvent(
        **dict(event),
        display_order=display_order,
        is_visible=True,
        category=category_of(event.type),
        importance=importance_of(event.type),
        related_events=related_event_ids(event, universe),
    )


def summarize(ordered: Sequence[HistoryEvent], now: datetime) -> TimelineSummary:
    """Build the summary of an already newest-first filtered set."""
    counts = Counter(e.type.value for e in ordered)

    positioned = list(enumerate(ordered, start=1))
    milestones = [(i, e) for i, e in positioned if e.type in MILESTONE_TYPES][:MAX_MILESTONES]
    recent = positioned[:MAX_RECENT]

    if ordered:
        span = TimelineDateRange(
            start=min(e.timestamp for e in ordered), end=max(e.timestamp for e in ordered)
        )
    else:
        span = TimelineDateRange(start=now, end=now)

    return TimelineSummary(
        total_events=len(ordered),
        visible_events=len(ordered),
        date_range=span,
        event_types=dict(counts),
        key_milestones=[decorate(e, i, ordered) for i, e in milestones],
        recent_activity=[decorate(e, i, ordered) for i, e in recent],
    )


def build_timeline(
    events: Sequence[HistoryEvent],
    property_id: str,
    filters: TimelineFilters | None = None,
    page: int = 1,
    limit: int | None = 20,
    *,
    now: datetime,
) -> PropertyTimeline:
    """Project one property's events into a paginated, decorated timeline.

    Parameters
    ----------
    events:
        Candidate events; anything not belonging to ``property_id`` is ignored.
    filters:
        Conjunctive filters (``None`` means no constraint).
    page, limit:
        1-based page and page size. ``limit=None`` disables paging.
    now:
        Reference instant used for the empty-set date span.
    """
    filters = filters or TimelineFilters()
    own = [e for e in events if e.property_id == property_id]
    ordered = newest_first(apply_filters(own, filters))

    if limit is None:
        page, limit = 1, max(len(ordered), 1)
    page_items, has_more = paginate(ordered, page, limit)
    offset = (page - 1) * limit

    decorated = [decorate(e, offset + i + 1, ordered) for i, e in enumerate(page_items)]

    return PropertyTimeline(
        property_id=property_id,
        events=decorated,
        summary=summarize(ordered, now),
        filters=filters,
        pagination=TimelinePagination(
            page=page, limit=limit, total=len(ordered), has_more=has_more
        ),
    )


__all__ = [
    "RELATED_WINDOW",
    "MAX_RELATED",
    "MILESTONE_TYPES",
    "apply_filters",
    "related_event_ids",
    "decorate",
    "summarize",
    "build_timeline",
]
