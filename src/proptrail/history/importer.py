"""
Bulk import of history events from JSON or CSV payloads.

This module only *parses*: each incoming row becomes either an
:class:`ImportedRow` (a validated create request plus the historical
timestamp, if the row carried one) or a list of :class:`FieldError`. The
:class:`~proptrail.history.service.HistoryService` decides what to write
based on the ``strict`` / ``skip_invalid`` options.

Accepted shapes
---------------
- JSON: a list of event objects, or an object with an ``events`` list
  (so a JSON timeline export can be re-imported as-is).
- CSV : one event per row. The export header
  (``Date,Type,Title,Description,Source,Tags``) is understood out of the box;
  other layouts are mapped with ``options.mapping``.

Rows without a source are attributed to the ``import`` source type.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import TypeAdapter, ValidationError

from proptrail.core.contracts.events import EventSource, HistoryEventType, payload_kind_for
from proptrail.core.contracts.requests import (
    IMPORT_SOURCES,
    CreateHistoryEventRequest,
    FieldError,
    TimelineImportOptions,
)
from proptrail.core.errors import UnsupportedFormatError
from proptrail.core.result import Result, err, ok

from .validator import validate_create

# Lower-cased header → canonical field, applied after the caller's mapping.
_HEADER_ALIASES: dict[str, str] = {
    "date": "timestamp",
    "when": "timestamp",
    "propertyid": "property_id",
    "ispublic": "is_public",
}

_DEFAULT_SOURCE = EventSource(type="import", id="import", name="Bulk import", verified=False)

_DATETIME: TypeAdapter[datetime] = TypeAdapter(datetime)


@dataclass(frozen=True, slots=True)
class ImportedRow:
    request: CreateHistoryEventRequest
    timestamp: datetime | None = None


def load_rows(payload: str | bytes, source: str) -> list[dict[str, Any]]:
    """Decode ``payload`` into raw row mappings.

    Raises
    ------
    UnsupportedFormatError
        If ``source`` is not ``json`` or ``csv``.
    ValueError
        If the payload cannot be decoded in the given format.
    """
    if source not in IMPORT_SOURCES:
        raise UnsupportedFormatError(source, IMPORT_SOURCES)
    text = payload.decode("utf-8-sig") if isinstance(payload, bytes) else payload

    if source == "csv":
        return [dict(row) for row in csv.DictReader(io.StringIO(text))]

    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Import payload is not valid JSON: {exc}") from exc
    if isinstance(data, Mapping):
        data = data.get("events", [])
    if not isinstance(data, list):
        raise ValueError("Import payload must be a list of events or an object with 'events'")
    return [dict(row) if isinstance(row, Mapping) else {} for row in data]


def _canonical_keys(raw: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in raw.items():
        if key is None:
            continue
        name = mapping.get(key, key)
        lowered = name.strip().lower().replace(" ", "_")
        name = _HEADER_ALIASES.get(lowered.replace("_", ""), lowered)
        if name == "source" and isinstance(value, str):
            name = "source_name"
        out[name] = value
    return out


def _parse_type(raw: Any) -> HistoryEventType | None:
    if isinstance(raw, HistoryEventType):
        return raw
    text = str(raw or "").strip()
    if not text:
        return None
    try:
        return HistoryEventType(text.lower())
    except ValueError:
        return HistoryEventType.__members__.get(text.upper())


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in {"1", "true", "yes", "y"}


def _parse_tags(raw: Any) -> list[str]:
    if isinstance(raw, str):
        parts: list[Any] = raw.split(";")
    elif isinstance(raw, list | tuple):
        parts = list(raw)
    else:
        return []
    return [str(p).strip() for p in parts if str(p).strip()]


def _parse_source(row: Mapping[str, Any]) -> Any:
    source = row.get("source")
    if isinstance(source, Mapping):
        return dict(source)
    flat = {
        "type": row.get("source_type"),
        "id": row.get("source_id"),
        "name": row.get("source_name"),
        "verified": row.get("source_verified"),
    }
    if not any(flat.values()):
        return _DEFAULT_SOURCE
    name = str(flat["name"] or "").strip()
    return {
        "type": flat["type"] or "import",
        "id": str(flat["id"] or name).strip(),
        "name": name,
        "verified": _parse_bool(flat["verified"]) if flat["verified"] is not None else False,
    }


def _parse_data(raw: Any, event_type: HistoryEventType) -> Any:
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        raw = json.loads(raw)
    if isinstance(raw, Mapping):
        return {"kind": payload_kind_for(event_type), **raw}
    return raw


def _errors_from(exc: ValidationError) -> list[FieldError]:
    return [
        FieldError(field=".".join(str(p) for p in e["loc"]) or "row", message=e["msg"])
        for e in exc.errors()
    ]


def parse_row(
    raw: Mapping[str, Any], options: TimelineImportOptions
) -> Result[ImportedRow, list[FieldError]]:
    """Turn one raw row into a validated create request."""
    row = _canonical_keys(raw, options.mapping)

    event_type = _parse_type(row.get("type"))
    if event_type is None:
        return err([FieldError(field="type", message=f"Unknown event type: {row.get('type')!r}")])

    try:
        data = _parse_data(row.get("data"), event_type)
    except json.JSONDecodeError as exc:
        return err([FieldError(field="data", message=f"Invalid JSON payload: {exc}")])

    timestamp: datetime | None = None
    if row.get("timestamp"):
        try:
            timestamp = _DATETIME.validate_python(row["timestamp"])
        except ValidationError:
            return err(
                [FieldError(field="timestamp", message=f"Invalid timestamp: {row['timestamp']!r}")]
            )

    candidate: dict[str, Any] = {
        "property_id": str(row.get("property_id") or options.property_id or ""),
        "type": event_type,
        "title": str(row.get("title") or ""),
        "description": str(row.get("description") or ""),
        "data": data,
        "source": _parse_source(row),
        "is_public": _parse_bool(row.get("is_public", False)),
        "tags": _parse_tags(row.get("tags")),
    }
    if isinstance(row.get("metadata"), Mapping):
        candidate["metadata"] = row["metadata"]

    try:
        request = CreateHistoryEventRequest.model_validate(candidate)
    except ValidationError as exc:
        return err(_errors_from(exc))

    problems = validate_create(request)
    if problems:
        return err(problems)
    return ok(ImportedRow(request=request, timestamp=timestamp))


def parse_payload(
    payload: str | bytes, options: TimelineImportOptions
) -> list[tuple[int, Result[ImportedRow, list[FieldError]]]]:
    """Parse every row of ``payload``; row numbers are 1-based."""
    rows = load_rows(payload, options.source)
    return [(idx, parse_row(raw, options)) for idx, raw in enumerate(rows, start=1)]


__all__ = ["ImportedRow", "load_rows", "parse_row", "parse_payload"]
