"""Tests for create/update admission checks."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from proptrail.core.contracts.events import EventSource, HistoryEvent, HistoryEventType
from proptrail.core.contracts.requests import (
    CreateHistoryEventRequest,
    UpdateHistoryEventRequest,
)
from proptrail.core.errors import EventValidationError
from proptrail.history.validator import (
    describe,
    ensure_valid_create,
    merge_data,
    validate_create,
    validate_update,
)

MakeRequest = Callable[..., CreateHistoryEventRequest]
MakeEvent = Callable[..., HistoryEvent]


def test_valid_request_has_no_errors(make_request: MakeRequest) -> None:
    assert validate_create(make_request()) == []


def test_all_missing_fields_are_reported_in_order() -> None:
    request = CreateHistoryEventRequest(type=HistoryEventType.NOTE_ADDED)
    errors = validate_create(request)
    assert [e.field for e in errors] == ["property_id", "title", "description", "source"]
    assert describe(errors) == (
        "Property ID is required, Event title is required, "
        "Event description is required, Event source with id and name is required"
    )


def test_whitespace_only_strings_count_as_missing(make_request: MakeRequest) -> None:
    errors = validate_create(make_request(title="   ", description="\t"))
    assert [e.field for e in errors] == ["title", "description"]


def test_source_needs_both_id_and_name(make_request: MakeRequest) -> None:
    errors = validate_create(make_request(source=EventSource(type="user", id="u-1")))
    assert [e.field for e in errors] == ["source"]


def test_payload_kind_must_match_event_type(make_request: MakeRequest) -> None:
    request = make_request(
        type=HistoryEventType.SOLD,
        data={"kind": "price", "old_price": 1, "new_price": 2},
    )
    errors = validate_create(request)
    assert [e.field for e in errors] == ["data"]
    assert "ownership" in errors[0].message


def test_merge_data_recomputes_price_figures(make_event: MakeEvent) -> None:
    event = make_event(
        HistoryEventType.PRICE_CHANGE,
        data={"kind": "price", "old_price": 450000, "new_price": 425000},
    )
    merged = merge_data(event, {"new_price": 405000})
    assert merged.old_price == 450000
    assert merged.change_amount == -45000
    assert merged.change_percentage == -10.0


def test_update_rejects_blank_text_and_bad_patches(make_event: MakeEvent) -> None:
    event = make_event(
        HistoryEventType.VIEWING_COMPLETED,
        data={"kind": "viewing", "viewer_id": "b-1", "viewer_type": "buyer", "duration": 15},
    )
    request = UpdateHistoryEventRequest(title=" ", data={"rating": 9})
    errors = validate_update(event, request)
    assert [e.field for e in errors] == ["title", "data"]

    assert validate_update(event, UpdateHistoryEventRequest(data={"rating": 4})) == []


def test_update_patch_cannot_switch_payload_kind(make_event: MakeEvent) -> None:
    event = make_event(HistoryEventType.NOTE_ADDED)
    errors = validate_update(event, UpdateHistoryEventRequest(data={"kind": "price"}))
    assert [e.field for e in errors] == ["data"]


def test_validation_error_carries_every_field_error() -> None:
    errors = validate_create(CreateHistoryEventRequest(type=HistoryEventType.SOLD))
    exc = EventValidationError(errors)
    assert exc.errors == errors
    assert str(exc) == describe(errors)


def test_ensure_valid_create_returns_the_source(make_request: MakeRequest) -> None:
    request = make_request()
    assert ensure_valid_create(request) == request.source


def test_ensure_valid_create_raises_with_all_field_errors() -> None:
    with pytest.raises(EventValidationError) as info:
        ensure_valid_create(CreateHistoryEventRequest(type=HistoryEventType.SOLD))
    assert [e.field for e in info.value.errors] == [
        "property_id",
        "title",
        "description",
        "source",
    ]
