"""
API routes for individual history events.

Endpoints
---------
- ``POST   /history``              : create an event (201, or 400 with field errors).
- ``GET    /history``              : paginated timeline of one property.
- ``POST   /history/search``       : cross-property search with facets.
- ``POST   /history/import``       : bulk import from a JSON/CSV payload.
- ``GET    /history/{event_id}``   : fetch one event (404 if unknown).
- ``PUT    /history/{event_id}``   : partial update (400 / 404).
- ``DELETE /history/{event_id}``   : delete one event (404 if unknown).

The service never raises for "not found" or for rejected input; this module
maps its ``success=False`` responses onto HTTP status codes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from proptrail.api.service_registry import get_history_service
from proptrail.core.contracts.events import EventImportance, HistoryEventType, SourceType
from proptrail.core.contracts.requests import (
    CreateHistoryEventRequest,
    DateRange,
    GetTimelineRequest,
    HistoryEventResponse,
    HistorySearchQuery,
    ImportReport,
    TimelineFilters,
    TimelineImportOptions,
    UpdateHistoryEventRequest,
)
from proptrail.core.contracts.search import HistorySearchResponse
from proptrail.core.contracts.timeline import TimelineResponse
from proptrail.core.settings import load_settings
from proptrail.history import HistoryService

router = APIRouter(prefix="/history", tags=["History"])

ServiceDep = Annotated[HistoryService, Depends(get_history_service)]

_MAX_LIMIT = load_settings().max_page_limit
_NOT_FOUND = "History event not found"


class ImportRequest(BaseModel):
    """Body of ``POST /history/import``."""

    payload: str = Field(description="Raw JSON or CSV text")
    options: TimelineImportOptions = Field(default_factory=TimelineImportOptions)


def _raise_for(result: HistoryEventResponse) -> None:
    """Translate an unsuccessful service response into an HTTP error."""
    if result.success:
        return
    if result.message == _NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.message)
    if result.errors:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": result.message,
                "errors": [e.model_dump() for e in result.errors],
            },
        )
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.message)


@router.post(
    "",
    response_model=HistoryEventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a new history event",
)
def create_history_event(
    request: CreateHistoryEventRequest, response: Response, service: ServiceDep
) -> HistoryEventResponse:
    """Validate and store one event.

    Rejected input is answered with 400 and the same envelope, so clients see
    every field error at once.
    """
    result = service.create_event(request)
    if not result.success:
        response.status_code = (
            status.HTTP_400_BAD_REQUEST
            if result.errors
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    return result


@router.get("", response_model=TimelineResponse, summary="Get a property timeline")
def get_timeline(
    service: ServiceDep,
    property_id: Annotated[str, Query(min_length=1)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1, le=_MAX_LIMIT)] = None,
    event_type: Annotated[list[HistoryEventType] | None, Query()] = None,
    importance: Annotated[list[EventImportance] | None, Query()] = None,
    source: Annotated[list[SourceType] | None, Query()] = None,
    tag: Annotated[list[str] | None, Query()] = None,
    is_public: bool | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> TimelineResponse:
    """Filters combine with AND; ``start`` and ``end`` must be given together."""
    filters = TimelineFilters(
        event_types=event_type or [],
        date_range=DateRange.from_bounds(start, end),
        sources=source or [],
        importance=importance or [],
        tags=tag or [],
        is_public=is_public,
    )
    result = service.get_property_timeline(
        GetTimelineRequest(property_id=property_id, filters=filters, page=page, limit=limit)
    )
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.message
        )
    return result


@router.post("/search", response_model=HistorySearchResponse, summary="Search history events")
def search_history(
    query: HistorySearchQuery,
    service: ServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1, le=_MAX_LIMIT)] = None,
) -> HistorySearchResponse:
    return service.search_events(query, page=page, limit=limit)


@router.post("/import", response_model=ImportReport, summary="Bulk import events")
def import_history(body: ImportRequest, response: Response, service: ServiceDep) -> ImportReport:
    """Import a JSON/CSV payload; an unknown ``options.source`` yields 400."""
    report = service.import_events(body.payload, body.options)
    if not report.success and not report.imported:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return report


@router.get("/{event_id}", response_model=HistoryEventResponse, summary="Get one event")
def get_history_event(event_id: str, service: ServiceDep) -> HistoryEventResponse:
    result = service.get_event(event_id)
    _raise_for(result)
    return result


@router.put("/{event_id}", response_model=HistoryEventResponse, summary="Update one event")
def update_history_event(
    event_id: str, request: UpdateHistoryEventRequest, service: ServiceDep
) -> HistoryEventResponse:
    result = service.update_event(event_id, request)
    _raise_for(result)
    return result


@router.delete("/{event_id}", response_model=HistoryEventResponse, summary="Delete one event")
def delete_history_event(event_id: str, service: ServiceDep) -> HistoryEventResponse:
    result = service.delete_event(event_id)
    _raise_for(result)
    return result


__all__ = ["router", "ImportRequest"]
