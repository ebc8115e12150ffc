# shipment_tracker/core/lifecycle.py

"""
Update strategy dispatcher.

One pure function per event type computes the (previous, new) status pair
for a shipment. Nothing here mutates the shipment; the registry applies the
returned ShippingUpdate.
"""

from typing import Callable, Dict, Union

from shipment_tracker.core.errors import UnknownEventTypeError
from shipment_tracker.core.events import EventType, to_event_type
from shipment_tracker.core.shipment import Shipment, ShippingUpdate

Strategy = Callable[[Shipment, int], ShippingUpdate]


def _transition_to(new_status: str) -> Strategy:
    def strategy(shipment: Shipment, timestamp: int) -> ShippingUpdate:
        return ShippingUpdate(
            previous_status=shipment.status,
            new_status=new_status,
            timestamp=timestamp,
        )
    return strategy


def _create(shipment: Shipment, timestamp: int) -> ShippingUpdate:
    # A creation always starts a fresh history line
    return ShippingUpdate(previous_status="", new_status="Created", timestamp=timestamp)


def _note_added(shipment: Shipment, timestamp: int) -> ShippingUpdate:
    return ShippingUpdate(
        previous_status=shipment.status,
        new_status=shipment.status,
        timestamp=timestamp,
    )


# Single source of truth for status transitions
UPDATE_STRATEGIES: Dict[EventType, Strategy] = {
    EventType.CREATE: _create,
    EventType.SHIPPED: _transition_to("Shipped"),
    EventType.LOCATION: _transition_to("In Transit"),
    EventType.DELIVERED: _transition_to("Delivered"),
    EventType.DELAYED: _transition_to("Delayed"),
    EventType.LOST: _transition_to("Lost"),
    EventType.CANCELLED: _transition_to("Cancelled"),
    EventType.NOTE_ADDED: _note_added,
}


def dispatch(
    event_type: Union[EventType, str],
    shipment: Shipment,
    timestamp: int,
) -> ShippingUpdate:
    """
    Compute the ShippingUpdate an event would produce.

    Raises UnknownEventTypeError for anything outside the eight canonical
    types.
    """
    resolved = event_type if isinstance(event_type, EventType) else to_event_type(event_type)
    strategy = UPDATE_STRATEGIES.get(resolved) if resolved is not None else None

    if strategy is None:
        raise UnknownEventTypeError(str(getattr(event_type, "value", event_type)))

    return strategy(shipment, timestamp)
