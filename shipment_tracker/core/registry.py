# shipment_tracker/core/registry.py

"""
SHIPMENT REGISTRY

The single authoritative, in-memory store of shipments and the ONLY place a
shipment is created or mutated.

Concurrency:
- Every create/apply/find on one shipment id runs under that id's
  re-entrant lock, so updates on the same id never interleave and reads
  never see a half-applied event.
- A short index lock guards only the id -> shipment and id -> lock maps.
  It is never held while a shipment is mutated or observers run, so work on
  different ids proceeds in parallel.
- Observers are notified on the mutating thread while the id lock is still
  held. A slow subscriber therefore delays the caller that produced the
  update (and any other caller waiting on the same id). Subscribers may call
  find() on the same id from inside the callback.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple, Union

from shipment_tracker.config import DAY_MS, DEFAULT_WINDOW_DAYS
from shipment_tracker.core.errors import (
    InvalidCreateError,
    ShipmentAlreadyExistsError,
    ShipmentNotFoundError,
)
from shipment_tracker.core.events import (
    DRIFT_EVENT_TYPES,
    EventType,
    ShipmentEvent,
    to_event_type,
)
from shipment_tracker.core.lifecycle import dispatch
from shipment_tracker.core.shipment import (
    Shipment,
    ShipmentCategory,
    ShipmentSnapshot,
    ShippingUpdate,
)
from shipment_tracker.intelligence import delivery_policy
from shipment_tracker.notifications.observer_hub import ObserverHub

logger = logging.getLogger(__name__)

INITIAL_STATUS = "created"


class ShipmentRegistry:
    """Concurrency-safe store owning every Shipment instance."""

    def __init__(
        self,
        hub: Optional[ObserverHub] = None,
        default_window_days: int = DEFAULT_WINDOW_DAYS,
    ):
        self.hub = hub if hub is not None else ObserverHub()
        self.default_window_ms = default_window_days * DAY_MS
        self._index_lock = threading.Lock()
        self._shipments: Dict[str, Shipment] = {}
        self._locks: Dict[str, threading.RLock] = {}

    # ==================================================
    # LOCKING
    # ==================================================

    def _lock_for(self, shipment_id: str) -> threading.RLock:
        with self._index_lock:
            lock = self._locks.get(shipment_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[shipment_id] = lock
            return lock

    def _existing_lock(self, shipment_id: str) -> Optional[threading.RLock]:
        with self._index_lock:
            return self._locks.get(shipment_id)

    def _get(self, shipment_id: str) -> Optional[Shipment]:
        with self._index_lock:
            return self._shipments.get(shipment_id)

    # ==================================================
    # LIFECYCLE
    # ==================================================

    def create(
        self,
        shipment_id: str,
        category: Union[ShipmentCategory, str],
        creation_timestamp: int,
        expected_delivery_timestamp: Optional[int] = None,
    ) -> ShipmentSnapshot:
        """
        Admit a new shipment.

        The expected delivery defaults to creation + the configured window.
        A creation-time policy violation marks the shipment abnormal; it does
        not reject it.

        Raises:
            InvalidCreateError: If a category string names no known category
            ShipmentAlreadyExistsError: If the id is already registered
        """
        if not isinstance(category, ShipmentCategory):
            try:
                category = ShipmentCategory.parse(category)
            except ValueError as e:
                raise InvalidCreateError(str(e)) from e

        if expected_delivery_timestamp is None:
            expected_delivery_timestamp = creation_timestamp + self.default_window_ms

        with self._lock_for(shipment_id):
            if self._get(shipment_id) is not None:
                raise ShipmentAlreadyExistsError(shipment_id)

            shipment = Shipment(
                shipment_id=shipment_id,
                category=category,
                creation_timestamp=creation_timestamp,
                expected_delivery_timestamp=expected_delivery_timestamp,
                status=INITIAL_STATUS,
            )
            creation_update = ShippingUpdate(
                previous_status="",
                new_status=INITIAL_STATUS,
                timestamp=creation_timestamp,
            )
            shipment.add_update(creation_update)

            result = delivery_policy.validate(
                category, creation_timestamp, expected_delivery_timestamp
            )
            if not result.is_valid:
                shipment.mark_abnormal(result.abnormality)
                logger.warning(f"Shipment {shipment_id} abnormal at creation: {result.message}")

            with self._index_lock:
                self._shipments[shipment_id] = shipment

            logger.info(f"Shipment {shipment_id} created ({category.value})")
            self.hub.notify(shipment_id, creation_update)
            return shipment.snapshot()

    def apply(
        self,
        shipment_id: str,
        event_type: Union[EventType, str],
        timestamp: int,
        payload: Optional[str] = None,
        estimated_delivery: Optional[int] = None,
    ) -> ShippingUpdate:
        """
        Apply one event to an existing shipment as a single atomic step.

        Create events never create through this path.

        Raises:
            ShipmentNotFoundError: If the id is unknown
            UnknownEventTypeError: If the dispatcher rejects the type
        """
        update, _ = self._apply(shipment_id, event_type, timestamp, payload, estimated_delivery)
        return update

    def _apply(
        self,
        shipment_id: str,
        event_type: Union[EventType, str],
        timestamp: int,
        payload: Optional[str],
        estimated_delivery: Optional[int],
    ) -> Tuple[ShippingUpdate, ShipmentSnapshot]:
        lock = self._existing_lock(shipment_id)
        if lock is None:
            raise ShipmentNotFoundError(shipment_id)

        with lock:
            shipment = self._get(shipment_id)
            if shipment is None:
                raise ShipmentNotFoundError(shipment_id)

            # Rejects unknown types before anything is touched
            update = dispatch(event_type, shipment, timestamp)
            resolved = (
                event_type if isinstance(event_type, EventType) else to_event_type(event_type)
            )

            if resolved == EventType.LOCATION and payload:
                shipment.update_location(payload)
                shipment.add_note(f"Location update: {payload}")
            elif resolved == EventType.NOTE_ADDED and payload:
                shipment.add_note(payload)

            shipment.add_update(update)

            if resolved in DRIFT_EVENT_TYPES:
                if estimated_delivery is None and payload:
                    estimated_delivery = _to_int(payload)
                if estimated_delivery is not None:
                    self._recheck_drift(shipment, estimated_delivery, timestamp)

            logger.info(
                f"Shipment {shipment_id}: {update.previous_status or '-'} -> {update.new_status}"
            )
            snapshot = shipment.snapshot()
            self.hub.notify(shipment_id, update)
            return update, snapshot

    def apply_event(self, event: ShipmentEvent) -> ShippingUpdate:
        return self.apply_event_with_snapshot(event)[0]

    def apply_event_with_snapshot(self, event: ShipmentEvent) -> Tuple[ShippingUpdate, ShipmentSnapshot]:
        """
        Apply an event and return the shipment as it stood right after it.

        The snapshot is taken under the shipment lock, so a concurrent
        update on the same id cannot leak into it.
        """
        return self._apply(
            event.shipment_id,
            event.event_type,
            event.timestamp,
            event.payload,
            event.estimated_delivery,
        )

    def _recheck_drift(self, shipment: Shipment, estimated_delivery: int, timestamp: int) -> None:
        shipment.expected_delivery_timestamp = estimated_delivery

        drift = delivery_policy.check_drift(
            shipment.category, shipment.creation_timestamp, estimated_delivery
        )
        if drift is None:
            return

        shipment.add_update(ShippingUpdate(
            previous_status=shipment.status,
            new_status=shipment.status,
            timestamp=timestamp,
        ))
        shipment.add_note(drift.note)
        shipment.mark_abnormal(drift.reason)
        logger.warning(f"Shipment {shipment.id} drift: {drift.reason}")

    # ==================================================
    # READS
    # ==================================================

    def find(self, shipment_id: str) -> Optional[ShipmentSnapshot]:
        """Return a snapshot of the shipment, or None."""
        lock = self._existing_lock(shipment_id)
        if lock is None:
            return None

        with lock:
            shipment = self._get(shipment_id)
            return shipment.snapshot() if shipment is not None else None

    def list_ids(self) -> List[str]:
        with self._index_lock:
            return list(self._shipments.keys())

    def snapshots(self) -> List[ShipmentSnapshot]:
        result = []
        for shipment_id in self.list_ids():
            snapshot = self.find(shipment_id)
            if snapshot is not None:
                result.append(snapshot)
        return result

    def __contains__(self, shipment_id: str) -> bool:
        return self._get(shipment_id) is not None

    def __len__(self) -> int:
        with self._index_lock:
            return len(self._shipments)


def _to_int(text: str) -> Optional[int]:
    try:
        return int(text.strip())
    except (AttributeError, ValueError):
        return None
