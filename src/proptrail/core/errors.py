"""Exception taxonomy for the history engine.

- :class:`EventValidationError` : malformed create/update input, carries the
  per-field violations.
- :class:`UnsupportedFormatError` : export/import asked for an unknown format.
- :class:`EventStoreError` : an unexpected fault inside the event store.

"Not found" is *not* an exception: absence of an event or of a
property's history is reported as an unsuccessful response or ``None``.
"""

from __future__ import annotations

from collections.abc import Sequence

from proptrail.core.contracts.requests import FieldError


class HistoryError(Exception):
    """Base class for all history-engine errors."""


class EventValidationError(HistoryError):
    """Raised when a request fails field-level validation."""

    def __init__(self, errors: Sequence[FieldError]) -> None:
        self.errors: list[FieldError] = list(errors)
        super().__init__(", ".join(e.message for e in self.errors) or "Invalid event")


class UnsupportedFormatError(HistoryError):
    """Raised when an export or import format is not supported."""

    def __init__(self, fmt: str, supported: Sequence[str]) -> None:
        self.format = fmt
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported format {fmt!r}; expected one of: {', '.join(self.supported)}"
        )


class EventStoreError(HistoryError):
    """Raised by an event store when it cannot honour a request."""


__all__ = [
    "HistoryError",
    "EventValidationError",
    "UnsupportedFormatError",
    "EventStoreError",
]
