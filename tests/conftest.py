"""Shared fixtures: a pinned clock, a fresh service and event/request builders."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from proptrail.core.clock import FixedClock
from proptrail.core.contracts.analytics import MarketBenchmark
from proptrail.core.contracts.events import EventSource, HistoryEvent, HistoryEventType
from proptrail.core.contracts.requests import CreateHistoryEventRequest
from proptrail.history import HistoryService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

AGENT = EventSource(type="agent", id="agent-7", name="Dana Realty", verified=True)


@pytest.fixture  # type: ignore[misc]
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture  # type: ignore[misc]
def service(clock: FixedClock) -> HistoryService:
    """A service over an empty in-memory store with deterministic time."""
    return HistoryService(clock=clock, benchmark=MarketBenchmark(), default_limit=20)


@pytest.fixture  # type: ignore[misc]
def make_request() -> Callable[..., CreateHistoryEventRequest]:
    """Build a valid create request; keyword overrides replace any field."""

    def _make(**overrides: Any) -> CreateHistoryEventRequest:
        fields: dict[str, Any] = {
            "property_id": "prop-1",
            "type": HistoryEventType.NOTE_ADDED,
            "title": "Agent note",
            "description": "Owner prefers weekday viewings",
            "source": AGENT,
        }
        fields.update(overrides)
        return CreateHistoryEventRequest.model_validate(fields)

    return _make


@pytest.fixture  # type: ignore[misc]
def make_event() -> Callable[..., HistoryEvent]:
    """Build a stored-shape event directly, for the pure engine functions.

    ``age`` (a timedelta) places the event that far before :data:`NOW`.
    """
    counter = itertools.count(1)

    def _make(
        event_type: HistoryEventType = HistoryEventType.NOTE_ADDED,
        *,
        age: timedelta = timedelta(0),
        **overrides: Any,
    ) -> HistoryEvent:
        n = next(counter)
        fields: dict[str, Any] = {
            "id": f"evt-{n}",
            "property_id": "prop-1",
            "type": event_type,
            "title": f"Event {n}",
            "description": f"Description {n}",
            "timestamp": NOW - age,
            "source": AGENT,
        }
        fields.update(overrides)
        return HistoryEvent.model_validate(fields)

    return _make
