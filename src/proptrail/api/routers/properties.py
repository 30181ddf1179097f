"""
API routes scoped to one property.

Endpoints
---------
- ``GET /properties/{property_id}/history``   : all events, newest first.
- ``GET /properties/{property_id}/analytics`` : distribution, trend, metrics, insights.
- ``GET /properties/{property_id}/export``    : timeline as JSON, CSV or PDF.

A property with no events is a 404 for history and analytics. Export of an
unknown property still succeeds and yields an empty timeline.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from proptrail.api.service_registry import get_history_service
from proptrail.core.contracts.analytics import HistoryAnalytics
from proptrail.core.contracts.events import HistoryEventType
from proptrail.core.contracts.requests import DateRange, TimelineExportOptions
from proptrail.core.contracts.timeline import PropertyHistory
from proptrail.history import HistoryService

router = APIRouter(prefix="/properties", tags=["Properties"])

ServiceDep = Annotated[HistoryService, Depends(get_history_service)]


@router.get("/{property_id}/history", response_model=PropertyHistory)
def get_property_history(property_id: str, service: ServiceDep) -> PropertyHistory:
    history = service.get_property_history(property_id)
    if history is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No history for property {property_id}",
        )
    return history


@router.get("/{property_id}/analytics", response_model=HistoryAnalytics)
def get_property_analytics(property_id: str, service: ServiceDep) -> HistoryAnalytics:
    analytics = service.get_history_analytics(property_id)
    if analytics is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No history for property {property_id}",
        )
    return analytics


@router.get("/{property_id}/export", summary="Export a property timeline")
def export_property_timeline(
    property_id: str,
    service: ServiceDep,
    fmt: Annotated[str, Query(alias="format")] = "json",
    event_type: Annotated[list[HistoryEventType] | None, Query()] = None,
    start: datetime | None = None,
    end: datetime | None = None,
    include_metadata: bool = True,
) -> Response:
    """Return the serialized timeline as a download.

    ``start`` and ``end`` must be given together. An unknown ``format`` is
    answered with 400 by the application's error handler.
    """
    options = TimelineExportOptions(
        format=fmt,
        date_range=DateRange.from_bounds(start, end),
        event_types=event_type or [],
        include_metadata=include_metadata,
    )
    exported = service.export_timeline(property_id, options)
    return Response(
        content=exported.content,
        media_type=exported.content_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


__all__ = ["router"]
