"""HistoryAnalytics: per-property aggregates and advisory insights."""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field


class ActivityPoint(BaseModel):
    """Number of events that happened on one UTC calendar day."""

    date: dt.date
    event_count: int = Field(ge=0)


class KeyMetrics(BaseModel):
    days_on_market: int = 0
    price_changes: int = 0
    viewings: int = 0
    status_changes: int = 0


class MarketBenchmark(BaseModel):
    """External reference figures; never derived from the property's own events."""

    average_days_on_market: float = 45
    average_price_changes: float = 2.3
    market_activity: Literal["high", "medium", "low"] = "medium"


class HistoryAnalytics(BaseModel):
    property_id: str
    total_events: int
    event_type_distribution: dict[str, int] = Field(default_factory=dict)
    activity_trend: list[ActivityPoint] = Field(default_factory=list)
    key_metrics: KeyMetrics = Field(default_factory=KeyMetrics)
    market_comparison: MarketBenchmark = Field(default_factory=MarketBenchmark)
    timeline_insights: list[str] = Field(default_factory=list)


__all__ = ["ActivityPoint", "KeyMetrics", "MarketBenchmark", "HistoryAnalytics"]
