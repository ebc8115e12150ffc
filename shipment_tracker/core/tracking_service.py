# shipment_tracker/core/tracking_service.py

"""
TRACKING SERVICE

The boundary contract every carrier talks to:

    create_shipment(raw_line)  -> TrackingResponse
    update_shipment(raw_line)  -> TrackingResponse
    get_shipment(shipment_id)  -> ShipmentSnapshot | None
    handle_request(raw)        -> str   (CREATE:/UPDATE:/TRACK: envelopes)

Core errors never escape this module: each one becomes a failed response.
The service does not know which carrier invoked it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from shipment_tracker.core.errors import (
    ParseError,
    ShipmentAlreadyExistsError,
    ShipmentNotFoundError,
    ShipmentTrackingError,
    UnknownEventTypeError,
)
from shipment_tracker.core.event_parser import parse, parse_create
from shipment_tracker.core.registry import ShipmentRegistry
from shipment_tracker.core.shipment import ShipmentSnapshot

logger = logging.getLogger(__name__)

CREATE_PREFIX = "CREATE:"
UPDATE_PREFIX = "UPDATE:"
TRACK_PREFIX = "TRACK:"

# Machine-readable failure kinds (carriers map these to their own codes)
ERROR_PARSE = "parse_error"
ERROR_ALREADY_EXISTS = "already_exists"
ERROR_NOT_FOUND = "not_found"
ERROR_UNKNOWN_EVENT_TYPE = "unknown_event_type"


def _error_kind(error: ShipmentTrackingError) -> str:
    if isinstance(error, ParseError):
        return ERROR_PARSE
    if isinstance(error, ShipmentAlreadyExistsError):
        return ERROR_ALREADY_EXISTS
    if isinstance(error, ShipmentNotFoundError):
        return ERROR_NOT_FOUND
    if isinstance(error, UnknownEventTypeError):
        return ERROR_UNKNOWN_EVENT_TYPE
    return "error"


@dataclass(frozen=True)
class TrackingResponse:
    """Result of a create or update request."""
    success: bool
    message: str
    shipment: Optional[ShipmentSnapshot] = None
    abnormality: str = ""
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "shipmentData": self.shipment.to_dict() if self.shipment else None,
            "abnormality": self.abnormality,
        }


def _abnormality_of(snapshot: Optional[ShipmentSnapshot]) -> str:
    if snapshot is None or not snapshot.is_abnormal:
        return ""
    return snapshot.abnormality_reason


class TrackingService:
    """Turns raw request lines into registry operations."""

    def __init__(self, registry: ShipmentRegistry):
        self.registry = registry

    def create_shipment(self, raw_line: str) -> TrackingResponse:
        try:
            command = parse_create(raw_line)
            snapshot = self.registry.create(
                command.shipment_id, command.category, command.timestamp
            )
        except ShipmentTrackingError as e:
            logger.warning(f"Create rejected for {raw_line!r}: {e}")
            return TrackingResponse(
                success=False,
                message=f"Failed to create shipment: {e}",
                error=_error_kind(e),
            )

        return TrackingResponse(
            success=True,
            message=f"Shipment {snapshot.id} created successfully",
            shipment=snapshot,
            abnormality=_abnormality_of(snapshot),
        )

    def update_shipment(self, raw_line: str) -> TrackingResponse:
        try:
            event = parse(raw_line)
            _, snapshot = self.registry.apply_event_with_snapshot(event)
        except ShipmentTrackingError as e:
            logger.warning(f"Update rejected for {raw_line!r}: {e}")
            return TrackingResponse(
                success=False,
                message=f"Failed to update shipment: {e}",
                error=_error_kind(e),
            )

        return TrackingResponse(
            success=True,
            message=f"Shipment {event.shipment_id} {event.event_type.lower()} successfully",
            shipment=snapshot,
            abnormality=_abnormality_of(snapshot),
        )

    def get_shipment(self, shipment_id: str) -> Optional[ShipmentSnapshot]:
        return self.registry.find(shipment_id.strip())

    def describe(self, shipment_id: str) -> str:
        snapshot = self.get_shipment(shipment_id)
        if snapshot is None:
            return f"Shipment {shipment_id.strip()} not found"
        location = snapshot.current_location or "unknown location"
        return f"Shipment {snapshot.id}: {snapshot.status} at {location}"

    def handle_request(self, raw_request: str) -> str:
        """
        Narrow carrier interface: one request string in, one response string out.
        """
        request = raw_request.strip()

        if request.startswith(CREATE_PREFIX):
            return self.create_shipment(request[len(CREATE_PREFIX):]).message
        if request.startswith(UPDATE_PREFIX):
            return self.update_shipment(request[len(UPDATE_PREFIX):]).message
        if request.startswith(TRACK_PREFIX):
            return self.describe(request[len(TRACK_PREFIX):])

        logger.warning(f"Unknown request format: {request!r}")
        return f"Unknown request format: {request}"
