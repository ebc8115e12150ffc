# shipment_tracker/ui/tracker_view.py

"""
TRACKER VIEW MODEL

Purpose:
- Holds the set of shipments a dashboard session is tracking
- Subscribes to the observer hub for each tracked id
- Keeps the latest snapshot per id, refreshed on every notification

Requirements:
• subscribe BEFORE the first read, so no update is missed in between
• an unknown id is unsubscribed again and reported via error_message
• never holds its own lock while calling into the registry
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

from shipment_tracker.core.registry import ShipmentRegistry
from shipment_tracker.core.shipment import ShipmentSnapshot, ShippingUpdate
from shipment_tracker.notifications.observer_hub import ObserverHub

logger = logging.getLogger(__name__)

DATE_FORMAT = "%b %d, %Y %H:%M"

HISTORY_COLUMNS = ["shipment_id", "previous_status", "new_status", "timestamp", "time", "description"]


def format_timestamp(timestamp_ms: int) -> str:
    """Epoch milliseconds -> 'Jan 01, 1970 00:00' (UTC)."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.strftime(DATE_FORMAT)


def format_update(update: ShippingUpdate) -> str:
    when = format_timestamp(update.timestamp)
    if not update.previous_status:
        return f"Status set to {update.new_status} at {when}"
    return f"{update.previous_status} → {update.new_status} at {when}"


class TrackerView:
    """Per-session tracking state for the dashboard."""

    def __init__(self, registry: ShipmentRegistry, hub: Optional[ObserverHub] = None):
        self.registry = registry
        self.hub = hub if hub is not None else registry.hub
        self._lock = threading.Lock()
        self._tracked: Dict[str, ShipmentSnapshot] = {}
        self.error_message = ""
        self.version = 0

    # ────────────────────────────────────────────────────────────
    # TRACKING
    # ────────────────────────────────────────────────────────────

    def is_tracking(self, shipment_id: str) -> bool:
        with self._lock:
            return shipment_id.strip() in self._tracked

    def start_tracking(self, shipment_id: str) -> bool:
        """
        Start tracking one shipment.

        Returns:
            bool: True if the shipment is (now) tracked
        """
        shipment_id = shipment_id.strip()
        if not shipment_id:
            self.error_message = "Please enter a shipment ID"
            return False

        if self.is_tracking(shipment_id):
            return True

        self.hub.subscribe(shipment_id, self.on_shipment_update)
        snapshot = self.registry.find(shipment_id)

        if snapshot is None:
            self.hub.unsubscribe(shipment_id, self.on_shipment_update)
            self.error_message = f"Shipment ID '{shipment_id}' not found"
            return False

        with self._lock:
            self._tracked[shipment_id] = snapshot
            self.version += 1
        self.error_message = ""
        logger.info(f"Tracking shipment {shipment_id}")
        return True

    def stop_tracking(self, shipment_id: str) -> None:
        shipment_id = shipment_id.strip()
        self.hub.unsubscribe(shipment_id, self.on_shipment_update)
        with self._lock:
            if self._tracked.pop(shipment_id, None) is not None:
                self.version += 1

    def toggle_tracking(self, shipment_id: str) -> bool:
        """Flip tracking for an id. Returns the new tracking state."""
        if self.is_tracking(shipment_id):
            self.stop_tracking(shipment_id)
            return False
        return self.start_tracking(shipment_id)

    def stop_all(self) -> None:
        with self._lock:
            ids = list(self._tracked)
        for shipment_id in ids:
            self.stop_tracking(shipment_id)

    def tracked(self) -> List[ShipmentSnapshot]:
        with self._lock:
            return list(self._tracked.values())

    # Observer handle; runs on the mutating thread
    def on_shipment_update(self, shipment_id: str, update: ShippingUpdate) -> None:
        snapshot = self.registry.find(shipment_id)
        if snapshot is None:
            return
        with self._lock:
            if shipment_id in self._tracked:
                self._tracked[shipment_id] = snapshot
                self.version += 1

    # ────────────────────────────────────────────────────────────
    # DISPLAY
    # ────────────────────────────────────────────────────────────

    def summary_rows(self) -> List[Dict[str, Any]]:
        rows = []
        for snapshot in self.tracked():
            rows.append({
                "shipment_id": snapshot.id,
                "category": snapshot.category.value,
                "status": snapshot.status,
                "location": snapshot.current_location or "Unknown",
                "expected_delivery": format_timestamp(snapshot.expected_delivery_timestamp),
                "abnormal": snapshot.is_abnormal,
                "abnormality_reason": snapshot.abnormality_reason,
                "notes": len(snapshot.notes),
            })
        return rows

    def history_frame(self, shipment_id: Optional[str] = None) -> pd.DataFrame:
        """Update history of tracked shipments, newest first."""
        rows = []
        for snapshot in self.tracked():
            if shipment_id is not None and snapshot.id != shipment_id:
                continue
            for update in snapshot.history:
                rows.append({
                    "shipment_id": snapshot.id,
                    "previous_status": update.previous_status,
                    "new_status": update.new_status,
                    "timestamp": update.timestamp,
                    "time": format_timestamp(update.timestamp),
                    "description": format_update(update),
                })

        if not rows:
            return pd.DataFrame(columns=HISTORY_COLUMNS)

        df = pd.DataFrame(rows, columns=HISTORY_COLUMNS)
        return df.sort_values("timestamp", ascending=False, kind="stable").reset_index(drop=True)
