"""Request/response envelopes exchanged with the History Service.

Create requests are *lenient*: missing strings default to ``""``
and a missing source to ``None``, so that the validator (not pydantic) owns
the "required field" rules and can report every violation at once, each
naming the offending field.

Update requests forbid unknown keys. Only ``title``, ``description``,
``data`` (a partial payload patch), ``is_public`` and ``tags`` may change;
anything else (``type``, ``property_id``, ``timestamp``, ``source``) is
rejected at parse time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from proptrail.core.clock import ensure_utc

from .events import (
    EventData,
    EventImportance,
    EventMetadata,
    EventSource,
    HistoryEvent,
    HistoryEventType,
    SourceType,
)


class FieldError(BaseModel):
    """A single validation failure tied to one request field."""

    field: str
    message: str


class DateRange(BaseModel):
    """Inclusive ``[start, end]`` window; naive datetimes are read as UTC."""

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode="after")
    def _ordered(self) -> DateRange:
        if self.start > self.end:
            raise ValueError("date range start must not be after end")
        return self

    @classmethod
    def from_bounds(cls, start: datetime | None, end: datetime | None) -> DateRange | None:
        """Build a range from optional bounds; both or neither must be given."""
        if start is None and end is None:
            return None
        if start is None or end is None:
            raise ValueError("Both 'start' and 'end' are required for a date range")
        return cls(start=start, end=end)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


class CreateHistoryEventRequest(BaseModel):
    """Input for ``HistoryService.create_event``."""

    property_id: str = ""
    type: HistoryEventType
    title: str = ""
    description: str = ""
    data: EventData | None = None
    source: EventSource | None = None
    metadata: EventMetadata | None = None
    is_public: bool = False
    tags: list[str] = Field(default_factory=list)


class UpdateHistoryEventRequest(BaseModel):
    """Partial update; ``None`` means "leave unchanged"."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    data: dict[str, Any] | None = None
    is_public: bool | None = None
    tags: list[str] | None = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class TimelineFilters(BaseModel):
    """Conjunctive timeline filters; an empty/absent field means no constraint."""

    event_types: list[HistoryEventType] = Field(default_factory=list)
    date_range: DateRange | None = None
    sources: list[SourceType] = Field(default_factory=list)
    importance: list[EventImportance] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_public: bool | None = None


class GetTimelineRequest(BaseModel):
    property_id: str
    filters: TimelineFilters = Field(default_factory=TimelineFilters)
    page: int = Field(default=1, ge=1)
    limit: int | None = Field(default=None, ge=1)


class HistorySearchQuery(BaseModel):
    """Cross-property search; every field is optional."""

    property_id: str | None = None
    event_types: list[HistoryEventType] = Field(default_factory=list)
    date_range: DateRange | None = None
    sources: list[SourceType] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    keywords: str | None = None
    importance: list[EventImportance] = Field(default_factory=list)


EXPORT_FORMATS: tuple[str, ...] = ("json", "csv", "pdf")


class TimelineExportOptions(BaseModel):
    """Export options. ``format`` is a plain string so unknown values reach the
    exporter and fail there with :class:`UnsupportedFormatError`."""

    format: str = "json"
    date_range: DateRange | None = None
    event_types: list[HistoryEventType] = Field(default_factory=list)
    include_metadata: bool = True

    def to_filters(self) -> TimelineFilters:
        return TimelineFilters(event_types=list(self.event_types), date_range=self.date_range)


IMPORT_SOURCES: tuple[str, ...] = ("json", "csv")


class TimelineImportOptions(BaseModel):
    """Bulk import options.

    ``mapping`` renames incoming keys/columns to canonical field names, e.g.
    ``{"listing_id": "property_id", "headline": "title"}``.
    """

    source: str = "json"
    mapping: dict[str, str] = Field(default_factory=dict)
    property_id: str | None = Field(
        default=None, description="Fallback property for rows that do not name one"
    )
    strict: bool = False
    skip_invalid: bool = True


class ImportRowError(BaseModel):
    row: int = Field(description="1-based row number in the payload")
    errors: list[FieldError]


class ImportReport(BaseModel):
    """Outcome of a bulk import.

    - ``strict``: any invalid row aborts the import; nothing is written.
    - ``skip_invalid``: valid rows are written, invalid ones reported.
    - neither: rows are written up to the first invalid one.
    """

    success: bool
    imported: list[str] = Field(default_factory=list)
    rejected: list[ImportRowError] = Field(default_factory=list)
    message: str | None = None


class HistoryEventResponse(BaseModel):
    """Uniform result of every single-event operation."""

    event: HistoryEvent | None = None
    success: bool
    message: str | None = None
    errors: list[FieldError] = Field(default_factory=list)


__all__ = [
    "FieldError",
    "DateRange",
    "CreateHistoryEventRequest",
    "UpdateHistoryEventRequest",
    "TimelineFilters",
    "GetTimelineRequest",
    "HistorySearchQuery",
    "EXPORT_FORMATS",
    "TimelineExportOptions",
    "IMPORT_SOURCES",
    "TimelineImportOptions",
    "ImportRowError",
    "ImportReport",
    "HistoryEventResponse",
]
