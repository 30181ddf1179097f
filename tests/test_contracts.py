"""Tests for the event contracts: payload union, derived fields, immutability."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import TypeAdapter, ValidationError

from proptrail.core.contracts.events import (
    PAYLOAD_KIND_BY_TYPE,
    EventData,
    EventMetadata,
    HistoryEvent,
    HistoryEventType,
    PricePayload,
    ViewingPayload,
    payload_kind_for,
)
from proptrail.core.contracts.requests import DateRange, UpdateHistoryEventRequest

MakeEvent = Callable[..., HistoryEvent]


def test_price_payload_derives_change_figures() -> None:
    payload = PricePayload(old_price=450000, new_price=425000)
    assert payload.change_amount == -25000
    assert payload.change_percentage == pytest.approx(-5.56)
    assert payload.currency == "USD"


def test_price_payload_keeps_explicit_figures() -> None:
    payload = PricePayload(old_price=100, new_price=110, change_percentage=9.0, change_amount=9)
    assert payload.change_percentage == 9.0
    assert payload.change_amount == 9


def test_event_data_is_discriminated_by_kind() -> None:
    adapter: TypeAdapter[object] = TypeAdapter(EventData)
    parsed = adapter.validate_python(
        {"kind": "viewing", "viewer_id": "b-1", "viewer_type": "buyer", "duration": 20}
    )
    assert isinstance(parsed, ViewingPayload)

    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "viewing", "viewer_id": "b-1"})
    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "teleport"})


def test_payloads_reject_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        PricePayload(old_price=1, new_price=2, discount=True)  # type: ignore[call-arg]


def test_every_event_type_has_a_payload_kind() -> None:
    assert set(PAYLOAD_KIND_BY_TYPE) == set(HistoryEventType)
    assert payload_kind_for(HistoryEventType.SOLD) == "ownership"
    assert payload_kind_for(HistoryEventType.OPEN_HOUSE) == "viewing"


def test_metadata_confidence_is_bounded() -> None:
    assert EventMetadata().confidence == 100
    with pytest.raises(ValidationError):
        EventMetadata(confidence=101)


def test_events_are_frozen_and_stamped_in_utc(make_event: MakeEvent) -> None:
    local = datetime(2024, 3, 1, 9, 0, tzinfo=timezone(timedelta(hours=-5)))
    event = make_event(timestamp=local)

    assert event.timestamp.utcoffset() == timedelta(0)
    assert event.timestamp.hour == 14
    with pytest.raises(ValidationError):
        event.title = "changed"  # type: ignore[misc]


def test_date_range_must_be_ordered() -> None:
    with pytest.raises(ValidationError):
        DateRange(start=datetime(2024, 2, 1), end=datetime(2024, 1, 1))


def test_update_request_forbids_immutable_fields() -> None:
    with pytest.raises(ValidationError):
        UpdateHistoryEventRequest.model_validate({"type": "sold"})
    with pytest.raises(ValidationError):
        UpdateHistoryEventRequest.model_validate({"property_id": "other"})
    assert UpdateHistoryEventRequest().is_empty()
    assert not UpdateHistoryEventRequest(is_public=False).is_empty()
