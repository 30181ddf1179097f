"""Event type → category / importance lookup.

Both functions are total: any type missing from its table falls back to
``EventCategory.CUSTOM`` / ``EventImportance.MEDIUM``.
"""

from __future__ import annotations

from proptrail.core.contracts.events import EventCategory, EventImportance, HistoryEventType

_T = HistoryEventType
_C = EventCategory
_I = EventImportance

CATEGORY_BY_TYPE: dict[HistoryEventType, EventCategory] = {
    _T.PRICE_CHANGE: _C.PRICE,
    _T.PRICE_INCREASE: _C.PRICE,
    _T.PRICE_DECREASE: _C.PRICE,
    _T.PRICE_TARGET_REACHED: _C.PRICE,
    _T.STATUS_CHANGE: _C.STATUS,
    _T.LISTED: _C.STATUS,
    _T.DELISTED: _C.STATUS,
    _T.RELISTED: _C.STATUS,
    _T.SOLD: _C.STATUS,
    _T.RENTED: _C.STATUS,
    _T.PENDING: _C.STATUS,
    _T.WITHDRAWN: _C.STATUS,
    _T.MARKET_UPDATE: _C.MARKET,
    _T.COMPARABLE_SOLD: _C.MARKET,
    _T.MARKET_TREND_CHANGE: _C.MARKET,
    _T.RENOVATION: _C.PROPERTY,
    _T.MAINTENANCE: _C.PROPERTY,
    _T.INSPECTION: _C.PROPERTY,
    _T.APPRAISAL: _C.PROPERTY,
    _T.DESCRIPTION_UPDATE: _C.PROPERTY,
    _T.PHOTO_UPDATE: _C.MEDIA,
    _T.PHOTO_ADDED: _C.MEDIA,
    _T.PHOTO_REMOVED: _C.MEDIA,
    _T.VIDEO_ADDED: _C.MEDIA,
    _T.VIRTUAL_TOUR_CREATED: _C.MEDIA,
    _T.VIEWING_SCHEDULED: _C.VIEWING,
    _T.VIEWING_COMPLETED: _C.VIEWING,
    _T.OPEN_HOUSE: _C.VIEWING,
    _T.CUSTOM_EVENT: _C.CUSTOM,
    _T.NOTE_ADDED: _C.SOCIAL,
    _T.COMMENT_ADDED: _C.SOCIAL,
    _T.SHARED: _C.SOCIAL,
    _T.FAVORITED: _C.SOCIAL,
}

# Types not listed here (e.g. DELISTED, MAINTENANCE) are MEDIUM.
IMPORTANCE_BY_TYPE: dict[HistoryEventType, EventImportance] = {
    _T.SOLD: _I.CRITICAL,
    _T.PRICE_TARGET_REACHED: _I.HIGH,
    _T.PRICE_CHANGE: _I.HIGH,
    _T.STATUS_CHANGE: _I.HIGH,
    _T.LISTED: _I.HIGH,
    _T.VIEWING_COMPLETED: _I.MEDIUM,
    _T.OPEN_HOUSE: _I.MEDIUM,
    _T.PHOTO_ADDED: _I.MEDIUM,
    _T.MARKET_UPDATE: _I.MEDIUM,
    _T.RENOVATION: _I.MEDIUM,
    _T.INSPECTION: _I.MEDIUM,
    _T.APPRAISAL: _I.MEDIUM,
    _T.VIEWING_SCHEDULED: _I.LOW,
    _T.PHOTO_UPDATE: _I.LOW,
    _T.DESCRIPTION_UPDATE: _I.LOW,
    _T.NOTE_ADDED: _I.LOW,
    _T.COMMENT_ADDED: _I.LOW,
    _T.SHARED: _I.LOW,
    _T.FAVORITED: _I.LOW,
}

DEFAULT_CATEGORY = EventCategory.CUSTOM
DEFAULT_IMPORTANCE = EventImportance.MEDIUM


def category_of(event_type: HistoryEventType) -> EventCategory:
    return CATEGORY_BY_TYPE.get(event_type, DEFAULT_CATEGORY)


def importance_of(event_type: HistoryEventType) -> EventImportance:
    return IMPORTANCE_BY_TYPE.get(event_type, DEFAULT_IMPORTANCE)


__all__ = [
    "CATEGORY_BY_TYPE",
    "IMPORTANCE_BY_TYPE",
    "DEFAULT_CATEGORY",
    "DEFAULT_IMPORTANCE",
    "category_of",
    "importance_of",
]
