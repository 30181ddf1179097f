"""
Per-property analytics.

Metrics
-------
- ``event_type_distribution``: histogram of event type values.
- ``activity_trend``: events per UTC calendar day, ascending.
- ``key_metrics``: days on market plus counts of events whose type *name*
  contains ``PRICE`` / ``VIEWING`` / ``STATUS``.
- ``market_comparison``: the injected :class:`MarketBenchmark`, unchanged.
- ``timeline_insights``: advisory strings from :data:`INSIGHT_RULES`.

Days on market uses the first LISTED and first SOLD event in store order.
With no SOLD event the end bound is the injected ``now``.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from proptrail.core.contracts.analytics import (
    ActivityPoint,
    HistoryAnalytics,
    KeyMetrics,
    MarketBenchmark,
)
from proptrail.core.contracts.events import HistoryEvent, HistoryEventType

_DAY = timedelta(days=1)
RECENT_WINDOW = timedelta(days=7)


def _count_named(events: Sequence[HistoryEvent], fragment: str) -> int:
    return sum(1 for e in events if fragment in e.type.name)


def _whole_days(start: datetime, end: datetime) -> int:
    return math.ceil((end - start) / _DAY)


def days_on_market(events: Sequence[HistoryEvent], now: datetime) -> int:
    listed = next((e for e in events if e.type is HistoryEventType.LISTED), None)
    if listed is None:
        return 0
    sold = next((e for e in events if e.type is HistoryEventType.SOLD), None)
    end = sold.timestamp if sold is not None else now
    return _whole_days(listed.timestamp, end)


def activity_trend(events: Sequence[HistoryEvent]) -> list[ActivityPoint]:
    per_day = Counter(e.timestamp.date() for e in events)
    return [ActivityPoint(date=day, event_count=n) for day, n in sorted(per_day.items())]


def key_metrics(events: Sequence[HistoryEvent], now: datetime) -> KeyMetrics:
    return KeyMetrics(
        days_on_market=days_on_market(events, now),
        price_changes=_count_named(events, "PRICE"),
        viewings=_count_named(events, "VIEWING"),
        status_changes=_count_named(events, "STATUS"),
    )


# ---- Insight rules -----------------------------------------------------------

InsightRule = Callable[[Sequence[HistoryEvent], datetime], str | None]


def _many_price_changes(events: Sequence[HistoryEvent], now: datetime) -> str | None:
    if _count_named(events, "PRICE") > 2:
        return "This property has had multiple price changes, indicating market sensitivity."
    return None


def _strong_interest(events: Sequence[HistoryEvent], now: datetime) -> str | None:
    if _count_named(events, "VIEWING") > 5:
        return "High viewing activity suggests strong buyer interest."
    return None


def _recent_activity(events: Sequence[HistoryEvent], now: datetime) -> str | None:
    recent = sum(1 for e in events if now - e.timestamp <= RECENT_WINDOW)
    if recent > 3:
        return "Recent high activity indicates active marketing efforts."
    return None


#: Evaluated in order; each rule contributes at most one insight.
INSIGHT_RULES: tuple[InsightRule, ...] = (
    _many_price_changes,
    _strong_interest,
    _recent_activity,
)


def timeline_insights(events: Sequence[HistoryEvent], now: datetime) -> list[str]:
    insights: list[str] = []
    for rule in INSIGHT_RULES:
        message = rule(events, now)
        if message is not None:
            insights.append(message)
    return insights


def analyze(
    events: Sequence[HistoryEvent],
    property_id: str,
    *,
    now: datetime,
    benchmark: MarketBenchmark | None = None,
) -> HistoryAnalytics | None:
    """Compute analytics for ``property_id``; ``None`` when it has no events."""
    own = [e for e in events if e.property_id == property_id]
    if not own:
        return None

    return HistoryAnalytics(
        property_id=property_id,
        total_events=len(own),
        event_type_distribution=dict(Counter(e.type.value for e in own)),
        activity_trend=activity_trend(own),
        key_metrics=key_metrics(own, now),
        market_comparison=benchmark or MarketBenchmark(),
        timeline_insights=timeline_insights(own, now),
    )


__all__ = [
    "RECENT_WINDOW",
    "INSIGHT_RULES",
    "days_on_market",
    "activity_trend",
    "key_metrics",
    "timeline_insights",
    "analyze",
]
