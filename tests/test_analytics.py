"""Tests for per-property analytics."""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from datetime import UTC, timedelta

from conftest import NOW
from proptrail.core.contracts.analytics import MarketBenchmark
from proptrail.core.contracts.events import HistoryEvent, HistoryEventType
from proptrail.history.analytics import activity_trend, analyze, days_on_market

MakeEvent = Callable[..., HistoryEvent]
T = HistoryEventType


def test_no_events_means_no_analytics(make_event: MakeEvent) -> None:
    assert analyze([], "prop-1", now=NOW) is None
    assert analyze([make_event(property_id="other")], "prop-1", now=NOW) is None


def test_days_on_market_listed_to_sold_rounds_up(make_event: MakeEvent) -> None:
    listed = make_event(T.LISTED, age=timedelta(days=10, hours=6))
    sold = make_event(T.SOLD, age=timedelta(days=1))
    assert days_on_market([listed, sold], NOW) == 10


def test_days_on_market_without_sale_runs_to_now(make_event: MakeEvent) -> None:
    listed = make_event(T.LISTED, age=timedelta(days=3))
    assert days_on_market([listed], NOW) == 3
    assert days_on_market([listed], NOW + timedelta(minutes=1)) == 4


def test_days_on_market_without_listing_is_zero(make_event: MakeEvent) -> None:
    assert days_on_market([make_event(T.SOLD)], NOW) == 0


def test_activity_trend_groups_by_utc_day(make_event: MakeEvent) -> None:
    late = make_event(timestamp=dt.datetime(2024, 5, 30, 23, 30, tzinfo=UTC))
    early = make_event(timestamp=dt.datetime(2024, 5, 31, 0, 30, tzinfo=UTC))
    same_day = make_event(timestamp=dt.datetime(2024, 5, 31, 18, 0, tzinfo=UTC))

    trend = activity_trend([same_day, early, late])

    assert [(p.date, p.event_count) for p in trend] == [
        (dt.date(2024, 5, 30), 1),
        (dt.date(2024, 5, 31), 2),
    ]


def test_key_metrics_count_by_type_name(make_event: MakeEvent) -> None:
    events = [
        make_event(T.PRICE_CHANGE, age=timedelta(days=50)),
        make_event(T.PRICE_DECREASE, age=timedelta(days=50)),
        make_event(T.VIEWING_SCHEDULED, age=timedelta(days=50)),
        make_event(T.VIEWING_COMPLETED, age=timedelta(days=50)),
        make_event(T.OPEN_HOUSE, age=timedelta(days=50)),
        make_event(T.STATUS_CHANGE, age=timedelta(days=50)),
    ]
    result = analyze(events, "prop-1", now=NOW)

    assert result is not None
    assert result.total_events == 6
    assert result.key_metrics.price_changes == 2
    assert result.key_metrics.viewings == 2
    assert result.key_metrics.status_changes == 1
    assert result.event_type_distribution["viewing_completed"] == 1
    assert result.timeline_insights == []


def test_insights_fire_in_rule_order(make_event: MakeEvent) -> None:
    events = [make_event(T.PRICE_CHANGE, age=timedelta(days=1)) for _ in range(3)]
    events += [make_event(T.VIEWING_COMPLETED, age=timedelta(days=40)) for _ in range(6)]

    result = analyze(events, "prop-1", now=NOW)

    assert result is not None
    assert result.timeline_insights == [
        "This property has had multiple price changes, indicating market sensitivity.",
        "High viewing activity suggests strong buyer interest.",
    ]


def test_recent_activity_insight_uses_the_trailing_week(make_event: MakeEvent) -> None:
    events = [make_event(age=timedelta(days=i)) for i in range(4)]
    result = analyze(events, "prop-1", now=NOW)
    assert result is not None
    assert result.timeline_insights == [
        "Recent high activity indicates active marketing efforts."
    ]

    later = analyze(events, "prop-1", now=NOW + timedelta(days=30))
    assert later is not None and later.timeline_insights == []


def test_market_comparison_is_the_injected_benchmark(make_event: MakeEvent) -> None:
    bench = MarketBenchmark(
        average_days_on_market=30, average_price_changes=1.5, market_activity="high"
    )
    result = analyze([make_event()], "prop-1", now=NOW, benchmark=bench)
    assert result is not None and result.market_comparison == bench
