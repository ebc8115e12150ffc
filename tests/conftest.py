import pytest

from shipment_tracker.core.registry import ShipmentRegistry
from shipment_tracker.core.tracking_service import TrackingService
from shipment_tracker.notifications.observer_hub import ObserverHub


@pytest.fixture()
def hub():
    return ObserverHub()


@pytest.fixture()
def registry(hub):
    return ShipmentRegistry(hub=hub)


@pytest.fixture()
def service(registry):
    return TrackingService(registry)


class Recorder:
    """Observer handle that remembers every (shipment_id, update) it receives."""

    def __init__(self):
        self.calls = []

    def __call__(self, shipment_id, update):
        self.calls.append((shipment_id, update))


@pytest.fixture()
def recorder():
    return Recorder()
