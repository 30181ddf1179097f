"""Admission checks for create and update requests.

Both validators return *every* violation found, in a fixed order, as
:class:`FieldError` items. An empty list means the request is admissible.
:func:`ensure_valid_create` is the raising form used on the write path.
Validation never touches the store.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from proptrail.core.contracts.events import (
    EventData,
    EventSource,
    HistoryEvent,
    payload_kind_for,
)
from proptrail.core.contracts.requests import (
    CreateHistoryEventRequest,
    FieldError,
    UpdateHistoryEventRequest,
)
from proptrail.core.errors import EventValidationError

_EVENT_DATA: TypeAdapter[Any] = TypeAdapter(EventData)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_create(request: CreateHistoryEventRequest) -> list[FieldError]:
    """Check required fields and payload shape of a create request.

    Order: ``property_id``, ``title``, ``description``, ``source``, ``data``.
    """
    errors: list[FieldError] = []

    if _blank(request.property_id):
        errors.append(FieldError(field="property_id", message="Property ID is required"))
    if _blank(request.title):
        errors.append(FieldError(field="title", message="Event title is required"))
    if _blank(request.description):
        errors.append(FieldError(field="description", message="Event description is required"))

    source = request.source
    if source is None or _blank(source.id) or _blank(source.name):
        errors.append(
            FieldError(field="source", message="Event source with id and name is required")
        )

    if request.data is not None:
        expected = payload_kind_for(request.type)
        if request.data.kind != expected:
            errors.append(
                FieldError(
                    field="data",
                    message=(
                        f"Payload kind {request.data.kind!r} does not match "
                        f"event type {request.type.value!r} (expected {expected!r})"
                    ),
                )
            )

    return errors


def merge_data(event: HistoryEvent, patch: dict[str, Any]) -> Any:
    """Merge a partial payload ``patch`` into ``event.data``.

    The result is re-validated as a full payload of the kind required by the
    event's type. Raises :class:`pydantic.ValidationError` or ``ValueError``.
    """
    expected = payload_kind_for(event.type)
    base: dict[str, Any] = event.data.model_dump() if event.data is not None else {}
    merged = {**base, **patch}
    merged.setdefault("kind", expected)
    if merged["kind"] != expected:
        raise ValueError(
            f"Payload kind {merged['kind']!r} does not match event type "
            f"{event.type.value!r} (expected {expected!r})"
        )
    # Derived price figures must be recomputed from the merged prices.
    if expected == "price" and ("old_price" in patch or "new_price" in patch):
        for key in ("change_amount", "change_percentage"):
            if key not in patch:
                merged.pop(key, None)
    return _EVENT_DATA.validate_python(merged)


def validate_update(
    event: HistoryEvent, request: UpdateHistoryEventRequest
) -> list[FieldError]:
    """Check an update against the event it would modify."""
    errors: list[FieldError] = []

    if request.title is not None and _blank(request.title):
        errors.append(FieldError(field="title", message="Event title cannot be empty"))
    if request.description is not None and _blank(request.description):
        errors.append(
            FieldError(field="description", message="Event description cannot be empty")
        )
    if request.data is not None:
        try:
            merge_data(event, request.data)
        except (ValidationError, ValueError) as exc:
            errors.append(FieldError(field="data", message=f"Invalid data patch: {exc}"))

    return errors


def describe(errors: list[FieldError]) -> str:
    """Join messages into the single human-readable line used in responses."""
    return ", ".join(e.message for e in errors)


def ensure_valid_create(request: CreateHistoryEventRequest) -> EventSource:
    """Return the request's source, or raise with every violation found.

    Raises
    ------
    EventValidationError
        If :func:`validate_create` reports any problem.
    """
    problems = validate_create(request)
    if problems or request.source is None:
        raise EventValidationError(problems)
    return request.source


__all__ = [
    "validate_create",
    "validate_update",
    "ensure_valid_create",
    "merge_data",
    "describe",
]
