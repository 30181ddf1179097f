"""
In-memory event store with per-property write serialization.

Layout
------
- ``_events[property_id]`` holds an immutable ``tuple`` of that property's
  events in insertion order. Writers never modify a tuple; they build a new
  one and rebind the key (copy-on-write).
- ``_property_of[event_id]`` maps an id back to its property.
- ``_locks[property_id]`` serializes append/delete/update of one property.

Readers take no lock: they grab the current tuple reference, which is
always a complete before- or after-state. Writers of *different*
properties never contend.

Durability is out of scope here; swap in another :class:`EventStore`
implementation for persistence.
"""

from __future__ import annotations

import threading

from proptrail.core.contracts.events import HistoryEvent
from proptrail.core.errors import EventStoreError

from .base import EventMutation


class InMemoryEventStore:
    """Dictionary-backed :class:`~proptrail.core.store.base.EventStore`."""

    __slots__ = ("_events", "_property_of", "_locks", "_registry_lock")

    def __init__(self) -> None:
        self._events: dict[str, tuple[HistoryEvent, ...]] = {}
        self._property_of: dict[str, str] = {}
        self._locks: dict[str, threading.Lock] = {}
        # Guards creation of per-property locks and the id index.
        self._registry_lock = threading.Lock()

    def _lock_for(self, property_id: str) -> threading.Lock:
        lock = self._locks.get(property_id)
        if lock is None:
            with self._registry_lock:
                lock = self._locks.setdefault(property_id, threading.Lock())
        return lock

    # ------------------------------- Writes ---------------------------------

    def append(self, event: HistoryEvent) -> None:
        """Append ``event`` to its property's log.

        Raises
        ------
        EventStoreError
            If an event with the same id already exists.
        """
        with self._lock_for(event.property_id):
            with self._registry_lock:
                if event.id in self._property_of:
                    raise EventStoreError(f"Duplicate event id: {event.id}")
                self._property_of[event.id] = event.property_id
            current = self._events.get(event.property_id, ())
            self._events[event.property_id] = (*current, event)

    def delete_by_id(self, event_id: str) -> HistoryEvent | None:
        """Hard-delete an event and return it, or ``None`` if unknown."""
        property_id = self._property_of.get(event_id)
        if property_id is None:
            return None
        with self._lock_for(property_id):
            current = self._events.get(property_id, ())
            removed = next((e for e in current if e.id == event_id), None)
            if removed is None:
                return None
            remaining = tuple(e for e in current if e.id != event_id)
            if remaining:
                self._events[property_id] = remaining
            else:
                self._events.pop(property_id, None)
            with self._registry_lock:
                self._property_of.pop(event_id, None)
            return removed

    def update(self, event_id: str, mutate: EventMutation) -> HistoryEvent | None:
        """Replace an event with ``mutate(current)`` under the property lock."""
        property_id = self._property_of.get(event_id)
        if property_id is None:
            return None
        with self._lock_for(property_id):
            current = self._events.get(property_id, ())
            for idx, existing in enumerate(current):
                if existing.id == event_id:
                    break
            else:
                return None
            updated = mutate(existing)
            if updated.id != existing.id or updated.property_id != existing.property_id:
                raise EventStoreError("An update may not change an event's id or property")
            self._events[property_id] = (*current[:idx], updated, *current[idx + 1 :])
            return updated

    # ------------------------------- Reads ----------------------------------

    def get_by_id(self, event_id: str) -> HistoryEvent | None:
        property_id = self._property_of.get(event_id)
        if property_id is None:
            return None
        for event in self._events.get(property_id, ()):
            if event.id == event_id:
                return event
        return None

    def get_by_property(self, property_id: str) -> list[HistoryEvent]:
        return list(self._events.get(property_id, ()))

    def all_events(self) -> list[HistoryEvent]:
        """Snapshot of every event, grouped by property in first-seen order."""
        snapshot = list(self._events.values())
        return [event for events in snapshot for event in events]

    def property_ids(self) -> tuple[str, ...]:
        return tuple(self._events.keys())


__all__ = ["InMemoryEventStore"]
