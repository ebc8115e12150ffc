# shipment_tracker/core/errors.py

"""
Error taxonomy for the tracking core.

Every failure in the core is raised as one of these and converted into a
failed TrackingResponse at the service boundary. None of them is fatal.
"""


class ShipmentTrackingError(Exception):
    """Base class for all tracking core errors."""
    pass


class ParseError(ShipmentTrackingError):
    """Raised when an input line cannot be turned into an event."""
    pass


class EmptyLineError(ParseError):
    """Raised for blank input."""

    def __init__(self, message: str = "Input line is empty"):
        super().__init__(message)


class TooFewFieldsError(ParseError):
    """Raised when a line carries fewer than the required fields."""
    pass


class InvalidCreateError(ParseError):
    """Raised when a creation line is malformed or names an unknown category."""
    pass


class ShipmentAlreadyExistsError(ShipmentTrackingError):
    """Raised when a shipment id is created twice."""

    def __init__(self, shipment_id: str):
        self.shipment_id = shipment_id
        super().__init__(f"Shipment '{shipment_id}' already exists")


class ShipmentNotFoundError(ShipmentTrackingError):
    """Raised when an operation references an unknown shipment id."""

    def __init__(self, shipment_id: str):
        self.shipment_id = shipment_id
        super().__init__(f"Shipment {shipment_id} not found")


class UnknownEventTypeError(ShipmentTrackingError):
    """Raised when the dispatcher has no strategy for an event type."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"Unknown update type: {event_type}")
