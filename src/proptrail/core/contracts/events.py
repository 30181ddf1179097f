"""HistoryEvent: the atomic fact of a property's history.

This module defines the event vocabulary (types, categories, importance
tiers, property statuses), the event source/metadata envelopes, and the
**tagged-union payload** carried in ``HistoryEvent.data``.

Payload union
-------------
Each payload model declares a literal ``kind`` discriminator, and pydantic
picks the right model from it::

    {"kind": "price", "old_price": 450000, "new_price": 425000}
    {"kind": "viewing", "viewer_id": "buyer-1", "viewer_type": "buyer", "duration": 30}

``PAYLOAD_KIND_BY_TYPE`` pins every event type to exactly one payload kind;
the validator rejects a ``data`` whose kind does not match its event type.

Immutability
------------
Events and payloads are frozen models. An update never mutates an event in
place; the store swaps in a new instance built with ``model_copy``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from proptrail.core.clock import ensure_utc


class HistoryEventType(str, Enum):
    """Discriminant tag of a history event."""

    # Price events
    PRICE_CHANGE = "price_change"
    PRICE_INCREASE = "price_increase"
    PRICE_DECREASE = "price_decrease"
    PRICE_TARGET_REACHED = "price_target_reached"

    # Status events
    STATUS_CHANGE = "status_change"
    LISTED = "listed"
    DELISTED = "delisted"
    RELISTED = "relisted"
    SOLD = "sold"
    RENTED = "rented"
    PENDING = "pending"
    WITHDRAWN = "withdrawn"

    # Market events
    MARKET_UPDATE = "market_update"
    COMPARABLE_SOLD = "comparable_sold"
    MARKET_TREND_CHANGE = "market_trend_change"

    # Property events
    RENOVATION = "renovation"
    MAINTENANCE = "maintenance"
    INSPECTION = "inspection"
    APPRAISAL = "appraisal"
    PHOTO_UPDATE = "photo_update"
    DESCRIPTION_UPDATE = "description_update"

    # Viewing events
    VIEWING_SCHEDULED = "viewing_scheduled"
    VIEWING_COMPLETED = "viewing_completed"
    OPEN_HOUSE = "open_house"

    # Media events
    PHOTO_ADDED = "photo_added"
    PHOTO_REMOVED = "photo_removed"
    VIDEO_ADDED = "video_added"
    VIRTUAL_TOUR_CREATED = "virtual_tour_created"

    # Custom / social events
    CUSTOM_EVENT = "custom_event"
    NOTE_ADDED = "note_added"
    COMMENT_ADDED = "comment_added"
    SHARED = "shared"
    FAVORITED = "favorited"


class EventCategory(str, Enum):
    """Coarse grouping of event types for display and analytics."""

    PRICE = "price"
    STATUS = "status"
    MARKET = "market"
    PROPERTY = "property"
    VIEWING = "viewing"
    MEDIA = "media"
    SOCIAL = "social"
    CUSTOM = "custom"


class EventImportance(str, Enum):
    """Priority tier derived from the event type."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PropertyStatus(str, Enum):
    FOR_SALE = "for_sale"
    FOR_RENT = "for_rent"
    SOLD = "sold"
    RENTED = "rented"
    PENDING = "pending"
    WITHDRAWN = "withdrawn"
    OFF_MARKET = "off_market"
    COMING_SOON = "coming_soon"


SourceType = Literal["system", "user", "agent", "mls", "api", "import"]
SOURCE_TYPES: tuple[str, ...] = ("system", "user", "agent", "mls", "api", "import")


# ---- Payloads ----------------------------------------------------------------


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class PricePayload(_Payload):
    """Price movement; change amount/percentage are derived when omitted."""

    kind: Literal["price"] = "price"
    old_price: float = Field(ge=0)
    new_price: float = Field(ge=0)
    change_percentage: float | None = None
    change_amount: float | None = None
    currency: str = "USD"

    @model_validator(mode="before")
    @classmethod
    def _derive_change(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        old, new = values.get("old_price"), values.get("new_price")
        if not isinstance(old, int | float) or not isinstance(new, int | float):
            return values
        out = dict(values)
        if out.get("change_amount") is None:
            out["change_amount"] = new - old
        if out.get("change_percentage") is None and old:
            out["change_percentage"] = round((new - old) / old * 100, 2)
        return out


class StatusPayload(_Payload):
    kind: Literal["status"] = "status"
    old_status: PropertyStatus
    new_status: PropertyStatus
    reason: str | None = None


class ListingPayload(_Payload):
    kind: Literal["listing"] = "listing"
    action: Literal["listed", "delisted", "relisted"]
    listing_date: datetime | None = None
    delisting_date: datetime | None = None
    days_on_market: int | None = Field(default=None, ge=0)


class OwnershipPayload(_Payload):
    kind: Literal["ownership"] = "ownership"
    action: Literal["sold", "rented", "transferred"]
    buyer_id: str | None = None
    seller_id: str | None = None
    transaction_amount: float | None = Field(default=None, ge=0)
    transaction_date: datetime | None = None


class MarketPayload(_Payload):
    kind: Literal["market"] = "market"
    market_trend: Literal["up", "down", "stable"]
    average_price_change: float = 0.0
    comparable_properties: int = Field(default=0, ge=0)
    market_activity: Literal["high", "medium", "low"] = "medium"


class PropertyActionPayload(_Payload):
    kind: Literal["property"] = "property"
    action: Literal["renovated", "maintained", "inspected", "appraised"]
    details: str = ""
    cost: float | None = Field(default=None, ge=0)
    contractor: str | None = None
    completion_date: datetime | None = None


class ViewingPayload(_Payload):
    kind: Literal["viewing"] = "viewing"
    viewer_id: str
    viewer_type: Literal["buyer", "agent", "inspector", "appraiser"]
    duration: int = Field(ge=0, description="Duration in minutes")
    feedback: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)


class MediaPayload(_Payload):
    kind: Literal["media"] = "media"
    action: Literal["photo_added", "photo_removed", "video_added", "virtual_tour_created"]
    media_count: int = Field(default=1, ge=0)
    media_type: Literal["photo", "video", "virtual_tour"] = "photo"
    media_url: str | None = None


class CustomPayload(_Payload):
    kind: Literal["custom"] = "custom"
    category: str = "general"
    details: Any = None


EventData = Annotated[
    PricePayload
    | StatusPayload
    | ListingPayload
    | OwnershipPayload
    | MarketPayload
    | PropertyActionPayload
    | ViewingPayload
    | MediaPayload
    | CustomPayload,
    Field(discriminator="kind"),
]

PayloadKind = Literal[
    "price", "status", "listing", "ownership", "market", "property", "viewing", "media", "custom"
]

_T = HistoryEventType

#: The single payload kind admitted by each event type.
PAYLOAD_KIND_BY_TYPE: dict[HistoryEventType, str] = {
    _T.PRICE_CHANGE: "price",
    _T.PRICE_INCREASE: "price",
    _T.PRICE_DECREASE: "price",
    _T.PRICE_TARGET_REACHED: "price",
    _T.STATUS_CHANGE: "status",
    _T.PENDING: "status",
    _T.WITHDRAWN: "status",
    _T.LISTED: "listing",
    _T.DELISTED: "listing",
    _T.RELISTED: "listing",
    _T.SOLD: "ownership",
    _T.RENTED: "ownership",
    _T.MARKET_UPDATE: "market",
    _T.COMPARABLE_SOLD: "market",
    _T.MARKET_TREND_CHANGE: "market",
    _T.RENOVATION: "property",
    _T.MAINTENANCE: "property",
    _T.INSPECTION: "property",
    _T.APPRAISAL: "property",
    _T.DESCRIPTION_UPDATE: "property",
    _T.VIEWING_SCHEDULED: "viewing",
    _T.VIEWING_COMPLETED: "viewing",
    _T.OPEN_HOUSE: "viewing",
    _T.PHOTO_UPDATE: "media",
    _T.PHOTO_ADDED: "media",
    _T.PHOTO_REMOVED: "media",
    _T.VIDEO_ADDED: "media",
    _T.VIRTUAL_TOUR_CREATED: "media",
    _T.CUSTOM_EVENT: "custom",
    _T.NOTE_ADDED: "custom",
    _T.COMMENT_ADDED: "custom",
    _T.SHARED: "custom",
    _T.FAVORITED: "custom",
}


def payload_kind_for(event_type: HistoryEventType) -> str:
    """Return the payload kind expected for ``event_type`` (``custom`` if unlisted)."""
    return PAYLOAD_KIND_BY_TYPE.get(event_type, "custom")


# ---- Envelopes ---------------------------------------------------------------


class EventSource(BaseModel):
    """Who or what produced an event."""

    model_config = ConfigDict(frozen=True)

    type: SourceType = "user"
    id: str = ""
    name: str = ""
    verified: bool = False


class EventMetadata(BaseModel):
    """Provenance and trust information attached to an event."""

    model_config = ConfigDict(frozen=True)

    confidence: Annotated[int, Field(ge=0, le=100)] = 100
    verified: bool = False
    source_url: str | None = None
    external_id: str | None = None
    import_date: datetime | None = None
    last_verified: datetime | None = None


class HistoryEvent(BaseModel):
    """A single immutable fact in a property's history."""

    model_config = ConfigDict(frozen=True)

    id: str
    property_id: str
    type: HistoryEventType
    title: str
    description: str
    timestamp: datetime
    data: EventData | None = None
    source: EventSource
    metadata: EventMetadata = Field(default_factory=EventMetadata)
    is_public: bool = False
    tags: tuple[str, ...] = ()

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


__all__ = [
    "HistoryEventType",
    "EventCategory",
    "EventImportance",
    "PropertyStatus",
    "SourceType",
    "SOURCE_TYPES",
    "PricePayload",
    "StatusPayload",
    "ListingPayload",
    "OwnershipPayload",
    "MarketPayload",
    "PropertyActionPayload",
    "ViewingPayload",
    "MediaPayload",
    "CustomPayload",
    "EventData",
    "PayloadKind",
    "PAYLOAD_KIND_BY_TYPE",
    "payload_kind_for",
    "EventSource",
    "EventMetadata",
    "HistoryEvent",
]
