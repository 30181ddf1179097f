"""History engine: validation, classification and the read-side projections.

Most callers only need :class:`~proptrail.history.service.HistoryService`.
"""

from __future__ import annotations

from .service import HistoryService

__all__ = ["HistoryService"]
