"""Core package initializer for PropTrail.

Shared building blocks live in submodules so downstream code imports them
explicitly, e.g.:
    from proptrail.core.settings import settings, get_logger
    from proptrail.core.contracts.events import HistoryEvent
"""

from __future__ import annotations

__all__ = ["__doc__"]
