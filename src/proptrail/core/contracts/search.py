"""Search results and facet histograms."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .events import HistoryEvent

#: Date-range facet buckets, in evaluation order.
DATE_BUCKETS: tuple[str, ...] = ("Last Week", "Last Month", "Last 3 Months", "Older")


class SearchFacets(BaseModel):
    """Counts over the filtered result set, computed before paging."""

    event_types: dict[str, int] = Field(default_factory=dict)
    sources: dict[str, int] = Field(default_factory=dict)
    date_ranges: dict[str, int] = Field(default_factory=dict)


class HistorySearchResponse(BaseModel):
    events: list[HistoryEvent]
    total: int
    page: int
    limit: int
    has_more: bool = False
    facets: SearchFacets = Field(default_factory=SearchFacets)


__all__ = ["DATE_BUCKETS", "SearchFacets", "HistorySearchResponse"]
