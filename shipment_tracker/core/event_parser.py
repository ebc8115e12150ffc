# shipment_tracker/core/event_parser.py

"""
EVENT PARSER

Turns raw comma-separated lines into normalized events.

Accepted forms:
    created,<id>,<category>,<timestamp>
    <type>,<id>,<timestamp>[,<payload>]

Timestamps are epoch milliseconds. A timestamp that is blank or not an
integer falls back to the current time instead of failing the line.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from shipment_tracker.core.errors import (
    EmptyLineError,
    InvalidCreateError,
    TooFewFieldsError,
)
from shipment_tracker.core.events import (
    DRIFT_EVENT_TYPES,
    EventType,
    ShipmentEvent,
    normalize_event_type,
)
from shipment_tracker.core.shipment import ShipmentCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateCommand:
    """Parsed form of a creation line."""
    shipment_id: str
    category: ShipmentCategory
    timestamp: int


def _current_time_ms() -> int:
    return int(time.time() * 1000)


def _split(line: str) -> List[str]:
    return [field.strip() for field in line.split(",")]


def _to_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except (TypeError, ValueError):
        return None


def parse_timestamp(text: Optional[str]) -> int:
    """
    Parse an epoch-millisecond timestamp.

    Blank or malformed input yields the current time.
    """
    if text is None or not text.strip():
        return _current_time_ms()

    value = _to_int(text.strip())
    if value is None:
        logger.warning(f"Unparseable timestamp {text!r}, using current time")
        return _current_time_ms()
    return value


def parse(line: str) -> ShipmentEvent:
    """
    Parse an update line into a ShipmentEvent.

    Raises:
        EmptyLineError: If the line is blank
        TooFewFieldsError: If type or shipment id is missing
    """
    if line is None or not line.strip():
        raise EmptyLineError()

    fields = _split(line.strip())
    if len(fields) < 2 or not fields[0] or not fields[1]:
        raise TooFewFieldsError(
            f"Expected at least <type>,<shipmentId>, got: {line.strip()!r}"
        )

    event_type = normalize_event_type(fields[0])
    shipment_id = fields[1]
    timestamp_field = fields[2] if len(fields) > 2 else ""
    # Notes and locations may contain commas themselves
    extra = ",".join(fields[3:]) if len(fields) > 3 else ""

    estimated_delivery = None
    if event_type in (EventType.SHIPPED.value, EventType.DELAYED.value) and extra:
        timestamp = parse_timestamp(extra)
        estimated_delivery = _to_int(extra)
    else:
        timestamp = parse_timestamp(timestamp_field)
        if event_type == EventType.CREATE.value and extra:
            estimated_delivery = _to_int(extra)

    return ShipmentEvent(
        event_type=event_type,
        shipment_id=shipment_id,
        timestamp=timestamp,
        payload=extra or None,
        estimated_delivery=estimated_delivery,
    )


def parse_create(line: str) -> CreateCommand:
    """
    Parse a creation line: created,<id>,<category>,<timestamp>.

    Raises:
        EmptyLineError: If the line is blank
        InvalidCreateError: On a short line, wrong keyword or unknown category
    """
    if line is None or not line.strip():
        raise EmptyLineError()

    fields = _split(line.strip())
    if len(fields) < 4:
        raise InvalidCreateError(
            "Invalid created shipment format. "
            "Expected: created,shipmentId,shipmentType,timestamp"
        )

    keyword, shipment_id, category_text, timestamp_text = fields[:4]

    if keyword.lower() != "created":
        raise InvalidCreateError(f"Expected 'created' event type, got: {keyword}")
    if not shipment_id:
        raise InvalidCreateError("Shipment id is missing")

    try:
        category = ShipmentCategory.parse(category_text)
    except ValueError as e:
        raise InvalidCreateError(str(e)) from e

    return CreateCommand(
        shipment_id=shipment_id,
        category=category,
        timestamp=parse_timestamp(timestamp_text),
    )


def is_drift_event(event: ShipmentEvent) -> bool:
    """True when the event carries a fresh estimate for the drift re-check."""
    return (
        event.estimated_delivery is not None
        and event.event_type in {t.value for t in DRIFT_EVENT_TYPES}
    )


def is_valid_update_format(line: str) -> bool:
    """Cheap shape check for an update line."""
    if line is None or not line.strip():
        return False
    fields = line.split(",")
    return len(fields) >= 2 and bool(fields[0].strip()) and bool(fields[1].strip())


def read_lines(path: Union[str, Path]) -> List[str]:
    """
    Read an event file.

    A missing or unreadable file yields an empty list.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return [line.rstrip("\r\n") for line in f]
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.warning(f"Could not read event file {path}: {e}")
        return []
