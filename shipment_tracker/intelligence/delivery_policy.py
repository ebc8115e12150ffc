# shipment_tracker/intelligence/delivery_policy.py

"""
DELIVERY POLICY ENGINE

Purpose:
- Decide whether an expected delivery satisfies a category's timing contract
- Re-check compliance when a later event revises the delivery estimate

Rules (window = expected delivery - creation):
    Standard   always valid
    Express    valid iff window <= 3 days
    Overnight  valid iff window <= 1 day
    Bulk       valid iff window >  3 days   (arriving too fast is the anomaly)

Windows are compared at millisecond precision, so 3 days + 1 ms already
breaks the Express contract. duration_days (whole days, truncated toward
zero) is reported for display only.
"""

from dataclasses import dataclass
from typing import Optional

from shipment_tracker.config import DAY_MS
from shipment_tracker.core.shipment import ShipmentCategory

EXPRESS_MAX_DAYS = 3
OVERNIGHT_MAX_DAYS = 1
BULK_MIN_DAYS = 3

EXPRESS_VIOLATION = "<=3 day delivery requirement violated"
OVERNIGHT_VIOLATION = "next day delivery requirement violated"
BULK_VIOLATION = "> 3 day delivery requirement violated"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a creation-time delivery check."""
    is_valid: bool
    message: str
    abnormality: str = ""
    duration_days: int = 0


@dataclass(frozen=True)
class DriftResult:
    """A revised estimate that breaks the category's original window."""
    note: str
    reason: str
    duration_days: int


def duration_days(creation_timestamp: int, expected_delivery_timestamp: int) -> int:
    """Whole days between two epoch-ms timestamps, truncated toward zero."""
    delta = expected_delivery_timestamp - creation_timestamp
    days = abs(delta) // DAY_MS
    return days if delta >= 0 else -days


def _exceeds(window_ms: int, days: int) -> bool:
    return window_ms > days * DAY_MS


def validate(
    category: ShipmentCategory,
    creation_timestamp: int,
    expected_delivery_timestamp: int,
) -> ValidationResult:
    """
    Check a delivery window against the category contract.

    Pure: the caller decides whether to mark the shipment abnormal.
    """
    window_ms = expected_delivery_timestamp - creation_timestamp
    days = duration_days(creation_timestamp, expected_delivery_timestamp)

    if category == ShipmentCategory.EXPRESS:
        if not _exceeds(window_ms, EXPRESS_MAX_DAYS):
            return ValidationResult(
                True,
                "Express shipment delivery timing is acceptable (<= 3 days)",
                duration_days=days,
            )
        return ValidationResult(
            False,
            "Express shipment abnormality: delivery time exceeds 3 days",
            EXPRESS_VIOLATION,
            days,
        )

    if category == ShipmentCategory.OVERNIGHT:
        if not _exceeds(window_ms, OVERNIGHT_MAX_DAYS):
            return ValidationResult(
                True,
                "Overnight shipment delivery timing is acceptable (next day)",
                duration_days=days,
            )
        return ValidationResult(
            False,
            "Overnight shipment abnormality: delivery time exceeds 1 day",
            OVERNIGHT_VIOLATION,
            days,
        )

    if category == ShipmentCategory.BULK:
        if _exceeds(window_ms, BULK_MIN_DAYS):
            return ValidationResult(
                True,
                "Bulk shipment delivery timing is acceptable (> 3 days)",
                duration_days=days,
            )
        return ValidationResult(
            False,
            "Bulk shipment abnormality: delivery time is too fast (should be > 3 days)",
            BULK_VIOLATION,
            days,
        )

    return ValidationResult(
        True,
        "Standard shipment delivery timing is acceptable",
        duration_days=days,
    )


def check_drift(
    category: ShipmentCategory,
    creation_timestamp: int,
    estimated_delivery: int,
) -> Optional[DriftResult]:
    """
    Re-check a revised delivery estimate against the original creation time.

    Returns None when the estimate still honours the category window.
    """
    window_ms = estimated_delivery - creation_timestamp
    days = duration_days(creation_timestamp, estimated_delivery)

    if category == ShipmentCategory.EXPRESS and _exceeds(window_ms, EXPRESS_MAX_DAYS):
        return DriftResult(
            note=f"Shipment is arriving later than the original {EXPRESS_MAX_DAYS}-day window",
            reason="Delivery deadline exceeded",
            duration_days=days,
        )

    if category == ShipmentCategory.OVERNIGHT and _exceeds(window_ms, OVERNIGHT_MAX_DAYS):
        return DriftResult(
            note=f"Shipment is arriving later than the original {OVERNIGHT_MAX_DAYS}-day window",
            reason="Next-day delivery deadline exceeded",
            duration_days=days,
        )

    if category == ShipmentCategory.BULK and not _exceeds(window_ms, BULK_MIN_DAYS):
        return DriftResult(
            note="Shipment is arriving sooner than the original window",
            reason="Delivered too early",
            duration_days=days,
        )

    return None
