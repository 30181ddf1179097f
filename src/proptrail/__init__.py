"""PropTrail: property event history, timelines and listing analytics.

The package is organised in three layers:

- ``proptrail.core``    : settings, contracts, clock, result type and the event store.
- ``proptrail.history`` : validation, classification and the read-side engines
  (timeline, search, analytics, export, import) behind :class:`HistoryService`.
- ``proptrail.api`` / ``proptrail.cli`` : thin HTTP and terminal surfaces.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
