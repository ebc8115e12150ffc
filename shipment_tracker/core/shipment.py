# shipment_tracker/core/shipment.py

"""
SHIPMENT ENTITY

Purpose:
- Mutable aggregate for one shipment (owned by the registry)
- Immutable ShippingUpdate history records
- Read-only snapshots for every caller outside the registry

Requirements:
• history is never empty once a shipment is registered
• status always equals history[-1].new_status
• only ShipmentRegistry mutates a Shipment
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ShipmentCategory(str, Enum):
    """Delivery-speed classification, fixed at creation."""
    STANDARD = "Standard"
    EXPRESS = "Express"
    OVERNIGHT = "Overnight"
    BULK = "Bulk"

    @classmethod
    def parse(cls, text: str) -> "ShipmentCategory":
        """
        Case-insensitive lookup.

        Raises:
            ValueError: If the text names no known category
        """
        for category in cls:
            if category.value.lower() == text.strip().lower():
                return category
        raise ValueError(f"Unknown shipment type: {text}")


@dataclass(frozen=True)
class ShippingUpdate:
    """Immutable status transition record."""
    previous_status: str
    new_status: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previousStatus": self.previous_status,
            "newStatus": self.new_status,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ShipmentSnapshot:
    """
    Read-only copy of a shipment at one point in time.

    Handed out by the registry so that display code never holds the live
    instance.
    """
    id: str
    category: ShipmentCategory
    status: str
    creation_timestamp: int
    expected_delivery_timestamp: int
    current_location: str
    notes: Tuple[str, ...]
    history: Tuple[ShippingUpdate, ...]
    is_abnormal: bool
    abnormality_reason: str

    @property
    def latest_update(self) -> Optional[ShippingUpdate]:
        return self.history[-1] if self.history else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON envelopes."""
        return {
            "id": self.id,
            "category": self.category.value,
            "status": self.status,
            "creationTimestamp": self.creation_timestamp,
            "expectedDeliveryTimestamp": self.expected_delivery_timestamp,
            "currentLocation": self.current_location,
            "notes": list(self.notes),
            "history": [update.to_dict() for update in self.history],
            "isAbnormal": self.is_abnormal,
            "abnormalityReason": self.abnormality_reason,
        }


class Shipment:
    """Mutable shipment record. Only the registry calls the mutators."""

    def __init__(
        self,
        shipment_id: str,
        category: ShipmentCategory,
        creation_timestamp: int,
        expected_delivery_timestamp: int,
        status: str = "created",
        current_location: str = "",
    ):
        self.id = shipment_id
        self.category = category
        self.status = status
        self.creation_timestamp = creation_timestamp
        self.expected_delivery_timestamp = expected_delivery_timestamp
        self.current_location = current_location
        self.notes: List[str] = []
        self.history: List[ShippingUpdate] = []
        self.is_abnormal = False
        self.abnormality_reason = ""

    def add_update(self, update: ShippingUpdate) -> None:
        self.history.append(update)
        self.status = update.new_status

    def add_note(self, note: str) -> None:
        self.notes.append(note)

    def update_location(self, location: str) -> None:
        self.current_location = location

    def mark_abnormal(self, reason: str) -> None:
        # Sticky: nothing in the tracking flow clears it
        self.is_abnormal = True
        self.abnormality_reason = reason

    def snapshot(self) -> ShipmentSnapshot:
        return ShipmentSnapshot(
            id=self.id,
            category=self.category,
            status=self.status,
            creation_timestamp=self.creation_timestamp,
            expected_delivery_timestamp=self.expected_delivery_timestamp,
            current_location=self.current_location,
            notes=tuple(self.notes),
            history=tuple(self.history),
            is_abnormal=self.is_abnormal,
            abnormality_reason=self.abnormality_reason,
        )
