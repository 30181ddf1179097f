"""
Process-wide History Service for the HTTP layer.

The API keeps one :class:`HistoryService` (and therefore one in-memory event
store) per process. Routers reach it through :func:`get_history_service`,
which is also the FastAPI dependency, so tests can either reset the
singleton or override the dependency with their own service.

Note on Persistence
-------------------
The default store is volatile; restarting the server drops every event.
Pass a different :class:`~proptrail.core.store.EventStore` to
:meth:`HistoryServiceRegistry.install` to change that.
"""

from __future__ import annotations

from typing import ClassVar

from proptrail.history import HistoryService


class HistoryServiceRegistry:
    """Holder for the global :class:`HistoryService` singleton."""

    _instance: ClassVar[HistoryService | None] = None

    @classmethod
    def get_instance(cls) -> HistoryService:
        """Accessor for the global service, created lazily."""
        if cls._instance is None:
            cls._instance = HistoryService()
        return cls._instance

    @classmethod
    def install(cls, service: HistoryService) -> None:
        """Replace the global service (e.g. with a persistent store)."""
        cls._instance = service

    @classmethod
    def reset(cls) -> None:
        """Forget the current service; the next access builds a fresh one."""
        cls._instance = None


def get_history_service() -> HistoryService:
    return HistoryServiceRegistry.get_instance()


__all__ = ["HistoryServiceRegistry", "get_history_service"]
