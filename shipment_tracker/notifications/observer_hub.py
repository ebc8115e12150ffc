"""
OBSERVER HUB

Purpose:
- Central subscription table: shipment id -> ordered list of handles
- Global subscribers that hear about every shipment
- Synchronous fan-out of committed ShippingUpdates

Requirements:
• subscribe is idempotent per (shipment id, handle)
• delivery happens on the caller's thread, in subscription order
• no queueing, no dropped notifications
• unsubscribing never touches the registry

A handle is any callable taking (shipment_id, update).
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from shipment_tracker.core.shipment import ShippingUpdate

logger = logging.getLogger(__name__)

ShipmentObserver = Callable[[str, ShippingUpdate], None]


class ObserverHub:
    """Subscription table plus synchronous notifier."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[ShipmentObserver]] = {}
        self._global: List[ShipmentObserver] = []

    # ────────────────────────────────────────────────────────────
    # SUBSCRIPTIONS
    # ────────────────────────────────────────────────────────────

    def subscribe(self, shipment_id: str, handle: ShipmentObserver) -> None:
        with self._lock:
            handles = self._subscriptions.setdefault(shipment_id, [])
            if handle not in handles:
                handles.append(handle)

    def unsubscribe(self, shipment_id: str, handle: ShipmentObserver) -> None:
        with self._lock:
            handles = self._subscriptions.get(shipment_id)
            if not handles or handle not in handles:
                return
            handles.remove(handle)
            if not handles:
                del self._subscriptions[shipment_id]

    def subscribe_all(self, handle: ShipmentObserver) -> None:
        with self._lock:
            if handle not in self._global:
                self._global.append(handle)

    def unsubscribe_all(self, handle: ShipmentObserver) -> None:
        with self._lock:
            if handle in self._global:
                self._global.remove(handle)

    def clear(self, shipment_id: Optional[str] = None) -> None:
        """Drop every subscription for one shipment, or all of them."""
        with self._lock:
            if shipment_id is None:
                self._subscriptions.clear()
                self._global.clear()
            else:
                self._subscriptions.pop(shipment_id, None)

    def subscribers(self, shipment_id: str) -> List[ShipmentObserver]:
        with self._lock:
            return list(self._subscriptions.get(shipment_id, []))

    def is_subscribed(self, shipment_id: str, handle: ShipmentObserver) -> bool:
        with self._lock:
            return handle in self._subscriptions.get(shipment_id, [])

    # ────────────────────────────────────────────────────────────
    # FAN-OUT
    # ────────────────────────────────────────────────────────────

    def notify(self, shipment_id: str, update: ShippingUpdate) -> int:
        """
        Deliver an update to every current subscriber of a shipment.

        Called by the registry after a committed mutation. The subscriber
        list is copied under the lock and called outside it, so a handle may
        subscribe or unsubscribe while being notified.

        Returns:
            int: Number of handles called
        """
        with self._lock:
            handles = list(self._subscriptions.get(shipment_id, []))
            handles.extend(h for h in self._global if h not in handles)

        for handle in handles:
            try:
                handle(shipment_id, update)
            except Exception:
                # The mutation is already committed; remaining subscribers still get it
                logger.exception(f"Observer {handle!r} failed for shipment {shipment_id}")

        return len(handles)
