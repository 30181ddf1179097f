"""Event store protocol and the bundled in-memory implementation."""

from __future__ import annotations

from .base import EventMutation, EventStore
from .memory import InMemoryEventStore

__all__ = ["EventStore", "EventMutation", "InMemoryEventStore"]
