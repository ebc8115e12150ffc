# shipment_tracker/core/events.py

"""
EVENT TYPES

Canonical event vocabulary shared by the parser, the dispatcher and the
registry. Input keywords are matched case-insensitively; anything outside the
vocabulary passes through capitalised so the dispatcher can reject it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventType(str, Enum):
    """Canonical shipment event types."""
    CREATE = "Create"
    SHIPPED = "Shipped"
    LOCATION = "Location"
    DELIVERED = "Delivered"
    DELAYED = "Delayed"
    LOST = "Lost"
    CANCELLED = "Cancelled"
    NOTE_ADDED = "NoteAdded"


# Input keyword -> canonical type
EVENT_KEYWORDS = {
    "created": EventType.CREATE,
    "create": EventType.CREATE,
    "shipped": EventType.SHIPPED,
    "location": EventType.LOCATION,
    "delivered": EventType.DELIVERED,
    "delayed": EventType.DELAYED,
    "lost": EventType.LOST,
    "canceled": EventType.CANCELLED,
    "cancelled": EventType.CANCELLED,
    "noteadded": EventType.NOTE_ADDED,
}

# Events whose payload may carry a revised estimated delivery timestamp
DRIFT_EVENT_TYPES = {EventType.CREATE, EventType.SHIPPED, EventType.DELAYED}


def normalize_event_type(keyword: str) -> str:
    """
    Map an input keyword to its canonical event type string.

    Unknown keywords come back with the first letter upper-cased,
    e.g. "returned" -> "Returned".
    """
    canonical = EVENT_KEYWORDS.get(keyword.strip().lower())
    if canonical is not None:
        return canonical.value
    keyword = keyword.strip()
    return keyword[:1].upper() + keyword[1:]


def to_event_type(value: str) -> Optional[EventType]:
    """Return the EventType for a canonical string, or None."""
    try:
        return EventType(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class ShipmentEvent:
    """
    One normalized instruction derived from an input line.

    Attributes:
        event_type: Canonical type string (may be an unknown passthrough)
        shipment_id: Target shipment
        timestamp: Effective event time in epoch milliseconds
        payload: Location or note text, raw estimate for Shipped/Delayed
        estimated_delivery: Revised delivery estimate for the drift re-check
    """
    event_type: str
    shipment_id: str
    timestamp: int
    payload: Optional[str] = None
    estimated_delivery: Optional[int] = None
