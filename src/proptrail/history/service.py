"""
History Service: the caller-facing facade of the history engine.

Responsibilities
----------------
- **Writes** (create/update/delete): validate first, then touch the store.
  Rejections and misses come back as ``success=False`` responses; store or
  serialization faults are logged and turned into a generic failure message.
- **Reads** (history, timeline, search, analytics, export): pure projections
  over a snapshot of the store, computed per request.
- **Time**: every "now" comes from the injected :class:`Clock`. Creation
  timestamps are strictly increasing even if the clock stalls or repeats.

Error policy
------------
Only two things raise out of this class: :class:`UnsupportedFormatError`
from ``export_timeline`` / ``import_events`` (checked before any work), and
:class:`HistoryError` from ``export_timeline`` when serialization fails.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta

from proptrail.core.clock import Clock, SystemClock
from proptrail.core.contracts.analytics import HistoryAnalytics, MarketBenchmark
from proptrail.core.contracts.events import EventMetadata, EventSource, HistoryEvent
from proptrail.core.contracts.requests import (
    CreateHistoryEventRequest,
    GetTimelineRequest,
    HistoryEventResponse,
    HistorySearchQuery,
    ImportReport,
    ImportRowError,
    TimelineExportOptions,
    TimelineImportOptions,
    UpdateHistoryEventRequest,
)
from proptrail.core.contracts.search import HistorySearchResponse
from proptrail.core.contracts.timeline import PropertyHistory, TimelineResponse
from proptrail.core.errors import EventValidationError, HistoryError, UnsupportedFormatError
from proptrail.core.result import Result, err, ok
from proptrail.core.settings import get_logger, load_settings
from proptrail.core.store import EventStore, InMemoryEventStore

from . import analytics as analytics_engine
from . import exporter, importer
from . import search as search_engine
from .filtering import newest_first
from .timeline import build_timeline
from .validator import describe, ensure_valid_create, merge_data, validate_update

logger = get_logger("proptrail.history")

_TICK = timedelta(microseconds=1)
_NOT_FOUND = "History event not found"


def _new_event_id() -> str:
    return f"evt_{uuid.uuid4().hex}"


def benchmark_from_settings() -> MarketBenchmark:
    cfg = load_settings()
    return MarketBenchmark(
        average_days_on_market=cfg.benchmark_days_on_market,
        average_price_changes=cfg.benchmark_price_changes,
        market_activity=cfg.benchmark_market_activity,
    )


class HistoryService:
    """Create, query and analyse property history events.

    Parameters
    ----------
    store:
        Any :class:`EventStore`; defaults to a fresh in-memory store.
    clock:
        Source of "now"; defaults to :class:`SystemClock`.
    benchmark:
        Market reference figures for analytics; defaults to settings.
    default_limit:
        Page size used when a request gives none; defaults to settings.
    """

    def __init__(
        self,
        store: EventStore | None = None,
        *,
        clock: Clock | None = None,
        benchmark: MarketBenchmark | None = None,
        default_limit: int | None = None,
    ) -> None:
        self.store: EventStore = store if store is not None else InMemoryEventStore()
        self.clock: Clock = clock if clock is not None else SystemClock()
        self.benchmark = benchmark if benchmark is not None else benchmark_from_settings()
        self.default_limit = default_limit or load_settings().default_page_limit
        self._stamp_lock = threading.Lock()
        self._last_stamp: datetime | None = None

    # ------------------------------- Helpers --------------------------------

    def _next_timestamp(self) -> datetime:
        """Return ``clock.now()``, nudged forward to stay strictly increasing."""
        with self._stamp_lock:
            stamp = self.clock.now()
            if self._last_stamp is not None and stamp <= self._last_stamp:
                stamp = self._last_stamp + _TICK
            self._last_stamp = stamp
            return stamp

    def _build_event(
        self, request: CreateHistoryEventRequest, source: EventSource, timestamp: datetime
    ) -> HistoryEvent:
        metadata = request.metadata or EventMetadata(confidence=100, verified=source.verified)
        return HistoryEvent(
            id=_new_event_id(),
            property_id=request.property_id.strip(),
            type=request.type,
            title=request.title.strip(),
            description=request.description.strip(),
            timestamp=timestamp,
            data=request.data,
            source=source,
            metadata=metadata,
            is_public=request.is_public,
            tags=tuple(dict.fromkeys(request.tags)),
        )

    def _admit(
        self, request: CreateHistoryEventRequest, timestamp: datetime | None = None
    ) -> Result[HistoryEvent, HistoryEventResponse]:
        """Validate ``request`` and append it; ``Err`` carries the response to return."""
        try:
            source = ensure_valid_create(request)
        except EventValidationError as exc:
            logger.warning("Rejected event for %r: %s", request.property_id, exc)
            return err(HistoryEventResponse(success=False, message=str(exc), errors=exc.errors))

        event = self._build_event(request, source, timestamp or self._next_timestamp())
        try:
            self.store.append(event)
        except Exception:
            logger.exception("Store append failed for property %s", event.property_id)
            return err(
                HistoryEventResponse(success=False, message="Failed to create history event")
            )
        logger.info(
            "Created %s event %s for property %s", event.type.value, event.id, event.property_id
        )
        return ok(event)

    # ------------------------------- Writes ---------------------------------

    def create_event(self, request: CreateHistoryEventRequest) -> HistoryEventResponse:
        admitted = self._admit(request)
        if admitted.is_err():
            return admitted.unwrap_err()
        return HistoryEventResponse(
            event=admitted.unwrap(), success=True, message="History event created successfully"
        )

    def update_event(
        self, event_id: str, request: UpdateHistoryEventRequest
    ) -> HistoryEventResponse:
        """Apply a partial update; immutable fields cannot be expressed in ``request``."""
        try:
            current = self.store.get_by_id(event_id)
            if current is None:
                return HistoryEventResponse(success=False, message=_NOT_FOUND)

            problems = validate_update(current, request)
            if problems:
                return HistoryEventResponse(
                    success=False, message=describe(problems), errors=problems
                )

            def mutate(event: HistoryEvent) -> HistoryEvent:
                changes: dict[str, object] = {}
                if request.title is not None:
                    changes["title"] = request.title.strip()
                if request.description is not None:
                    changes["description"] = request.description.strip()
                if request.data is not None:
                    changes["data"] = merge_data(event, request.data)
                if request.is_public is not None:
                    changes["is_public"] = request.is_public
                if request.tags is not None:
                    changes["tags"] = tuple(dict.fromkeys(request.tags))
                return event.model_copy(update=changes)

            updated = self.store.update(event_id, mutate)
        except Exception:
            logger.exception("Update failed for event %s", event_id)
            return HistoryEventResponse(success=False, message="Failed to update history event")

        if updated is None:
            return HistoryEventResponse(success=False, message=_NOT_FOUND)
        return HistoryEventResponse(
            event=updated, success=True, message="History event updated successfully"
        )

    def delete_event(self, event_id: str) -> HistoryEventResponse:
        try:
            removed = self.store.delete_by_id(event_id)
        except Exception:
            logger.exception("Delete failed for event %s", event_id)
            return HistoryEventResponse(success=False, message="Failed to delete history event")
        if removed is None:
            return HistoryEventResponse(success=False, message=_NOT_FOUND)
        logger.info("Deleted event %s from property %s", removed.id, removed.property_id)
        return HistoryEventResponse(
            event=removed, success=True, message="History event deleted successfully"
        )

    def import_events(
        self, payload: str | bytes, options: TimelineImportOptions | None = None
    ) -> ImportReport:
        """Bulk-create events from a JSON/CSV payload.

        Rows may carry a historical ``timestamp``; it is kept as-is and the
        import instant is recorded in ``metadata.import_date``.

        Raises
        ------
        UnsupportedFormatError
            If ``options.source`` is not a supported import format.
        """
        options = options or TimelineImportOptions()
        try:
            parsed = importer.parse_payload(payload, options)
        except ValueError as exc:
            return ImportReport(success=False, message=str(exc))

        rejected = [
            ImportRowError(row=idx, errors=res.unwrap_err()) for idx, res in parsed if res.is_err()
        ]
        if options.strict and rejected:
            return ImportReport(
                success=False,
                rejected=rejected,
                message=f"Import aborted: {len(rejected)} invalid row(s)",
            )

        imported: list[str] = []
        reported: list[ImportRowError] = []
        imported_at = self.clock.now()
        for idx, res in parsed:
            if res.is_err():
                reported.append(ImportRowError(row=idx, errors=res.unwrap_err()))
                if not options.skip_invalid:
                    break
                continue
            row = res.unwrap()
            base = row.request.metadata or EventMetadata(verified=False)
            request = row.request.model_copy(
                update={"metadata": base.model_copy(update={"import_date": imported_at})}
            )
            admitted = self._admit(request, row.timestamp)
            if admitted.is_err():
                failure = admitted.unwrap_err()
                reported.append(ImportRowError(row=idx, errors=failure.errors))
                if not options.skip_invalid:
                    break
                continue
            imported.append(admitted.unwrap().id)

        logger.info("Imported %d event(s), rejected %d", len(imported), len(reported))
        return ImportReport(
            success=not reported,
            imported=imported,
            rejected=reported,
            message=f"Imported {len(imported)} event(s)",
        )

    # ------------------------------- Reads ----------------------------------

    def get_event(self, event_id: str) -> HistoryEventResponse:
        try:
            event = self.store.get_by_id(event_id)
        except Exception:
            logger.exception("Lookup failed for event %s", event_id)
            return HistoryEventResponse(success=False, message="Failed to get history event")
        if event is None:
            return HistoryEventResponse(success=False, message=_NOT_FOUND)
        return HistoryEventResponse(event=event, success=True)

    def property_ids(self) -> list[str]:
        """Ids of every property with at least one event, in first-seen order."""
        try:
            return list(self.store.property_ids())
        except Exception:
            logger.exception("Listing properties failed")
            return []

    def get_property_history(self, property_id: str) -> PropertyHistory | None:
        """All events of ``property_id`` newest first, or ``None`` if it has none."""
        try:
            events = newest_first(self.store.get_by_property(property_id))
        except Exception:
            logger.exception("History lookup failed for property %s", property_id)
            return None
        if not events:
            return None
        return PropertyHistory(
            id=f"history-{property_id}",
            property_id=property_id,
            events=events,
            created_at=events[-1].timestamp,
            updated_at=events[0].timestamp,
            total_events=len(events),
            last_event_date=events[0].timestamp,
        )

    def get_property_timeline(self, request: GetTimelineRequest) -> TimelineResponse:
        try:
            timeline = build_timeline(
                self.store.get_by_property(request.property_id),
                request.property_id,
                request.filters,
                page=request.page,
                limit=request.limit or self.default_limit,
                now=self.clock.now(),
            )
        except Exception:
            logger.exception("Timeline build failed for property %s", request.property_id)
            return TimelineResponse(success=False, message="Failed to get property timeline")
        return TimelineResponse(timeline=timeline, success=True)

    def search_events(
        self, query: HistorySearchQuery, page: int = 1, limit: int | None = None
    ) -> HistorySearchResponse:
        """Search across the store; a store fault yields an empty result page."""
        limit = limit or self.default_limit
        events: list[HistoryEvent]
        try:
            if query.property_id is not None:
                events = self.store.get_by_property(query.property_id)
            else:
                events = self.store.all_events()
        except Exception:
            logger.exception("Search failed to read the store")
            events = []
        return search_engine.search(events, query, page=page, limit=limit, now=self.clock.now())

    def get_history_analytics(self, property_id: str) -> HistoryAnalytics | None:
        try:
            events = self.store.get_by_property(property_id)
        except Exception:
            logger.exception("Analytics lookup failed for property %s", property_id)
            return None
        return analytics_engine.analyze(
            events,
            property_id,
            now=self.clock.now(),
            benchmark=self.benchmark,
        )

    def export_timeline(
        self, property_id: str, options: TimelineExportOptions
    ) -> exporter.ExportedTimeline:
        """Serialize the full filtered timeline of ``property_id``.

        Raises
        ------
        UnsupportedFormatError
            Before any store access, if ``options.format`` is unknown.
        HistoryError
            If reading or serialization fails.
        """
        exporter.check_format(options.format)
        try:
            return exporter.export_timeline(
                self.store.get_by_property(property_id),
                property_id,
                options,
                now=self.clock.now(),
            )
        except UnsupportedFormatError:
            raise
        except Exception as exc:
            logger.exception("Export failed for property %s", property_id)
            raise HistoryError("Failed to export timeline") from exc


__all__ = ["HistoryService", "benchmark_from_settings"]
