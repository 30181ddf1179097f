"""Timeline projections: read-only views computed per request.

None of these models has its own lifecycle; they are rebuilt from the
current event set every time they are requested.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .events import EventCategory, EventImportance, HistoryEvent
from .requests import TimelineFilters


class PropertyHistory(BaseModel):
    """All events of one property, newest first."""

    id: str
    property_id: str
    events: list[HistoryEvent]
    created_at: datetime = Field(description="Timestamp of the oldest event")
    updated_at: datetime = Field(description="Timestamp of the newest event")
    total_events: int
    last_event_date: datetime


class TimelineEvent(HistoryEvent):
    """A history event decorated for presentation."""

    display_order: int = Field(ge=1)
    is_visible: bool = True
    category: EventCategory
    importance: EventImportance
    related_events: list[str] = Field(default_factory=list)


class TimelineDateRange(BaseModel):
    start: datetime
    end: datetime


class TimelineSummary(BaseModel):
    """Aggregates over the *full* filtered set, independent of paging."""

    total_events: int
    visible_events: int
    date_range: TimelineDateRange
    event_types: dict[str, int] = Field(default_factory=dict)
    key_milestones: list[TimelineEvent] = Field(default_factory=list)
    recent_activity: list[TimelineEvent] = Field(default_factory=list)


class TimelinePagination(BaseModel):
    page: int
    limit: int
    total: int
    has_more: bool


class PropertyTimeline(BaseModel):
    property_id: str
    events: list[TimelineEvent]
    summary: TimelineSummary
    filters: TimelineFilters
    pagination: TimelinePagination


class TimelineResponse(BaseModel):
    timeline: PropertyTimeline | None = None
    success: bool
    message: str | None = None


__all__ = [
    "PropertyHistory",
    "TimelineEvent",
    "TimelineDateRange",
    "TimelineSummary",
    "TimelinePagination",
    "PropertyTimeline",
    "TimelineResponse",
]
