"""Event store protocol.

The history engine never assumes a storage technology. Anything that
implements :class:`EventStore` (the in-memory store shipped here, or a
database-backed adapter) can sit behind :class:`HistoryService`.

Contract
--------
- ``append`` rejects a duplicate id with :class:`EventStoreError`.
- ``get_by_property`` returns a snapshot list in store (insertion) order.
- ``delete_by_id`` / ``update`` return ``None`` when the id is unknown.
- ``update`` applies ``mutate`` to the current event atomically with respect
  to other writers of the same property and publishes the returned event
  as a whole; readers see the old or the new event, never a mix.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from proptrail.core.contracts.events import HistoryEvent

EventMutation = Callable[[HistoryEvent], HistoryEvent]


@runtime_checkable
class EventStore(Protocol):
    def append(self, event: HistoryEvent) -> None: ...

    def get_by_id(self, event_id: str) -> HistoryEvent | None: ...

    def get_by_property(self, property_id: str) -> list[HistoryEvent]: ...

    def delete_by_id(self, event_id: str) -> HistoryEvent | None: ...

    def update(self, event_id: str, mutate: EventMutation) -> HistoryEvent | None: ...

    def all_events(self) -> list[HistoryEvent]: ...

    def property_ids(self) -> Sequence[str]: ...


__all__ = ["EventStore", "EventMutation"]
