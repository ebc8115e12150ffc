"""Tests for the update strategy dispatcher."""

import pytest

from shipment_tracker.core.errors import UnknownEventTypeError
from shipment_tracker.core.events import EventType
from shipment_tracker.core.lifecycle import UPDATE_STRATEGIES, dispatch
from shipment_tracker.core.shipment import Shipment, ShipmentCategory


def _make_shipment(status="created"):
    return Shipment("s1", ShipmentCategory.STANDARD, 0, 1000, status=status)


class TestDispatch:
    @pytest.mark.parametrize(
        "event_type, expected",
        [
            (EventType.SHIPPED, "Shipped"),
            (EventType.LOCATION, "In Transit"),
            (EventType.DELIVERED, "Delivered"),
            (EventType.DELAYED, "Delayed"),
            (EventType.LOST, "Lost"),
            (EventType.CANCELLED, "Cancelled"),
        ],
    )
    def test_transitions(self, event_type, expected):
        update = dispatch(event_type, _make_shipment("Shipped"), 50)
        assert update.previous_status == "Shipped"
        assert update.new_status == expected
        assert update.timestamp == 50

    def test_accepts_canonical_strings(self):
        assert dispatch("Delivered", _make_shipment(), 1).new_status == "Delivered"

    def test_create_starts_fresh(self):
        update = dispatch(EventType.CREATE, _make_shipment("Delivered"), 7)
        assert update.previous_status == ""
        assert update.new_status == "Created"

    def test_note_added_keeps_status(self):
        update = dispatch(EventType.NOTE_ADDED, _make_shipment("Delayed"), 7)
        assert update.previous_status == "Delayed"
        assert update.new_status == "Delayed"

    def test_unknown_type(self):
        with pytest.raises(UnknownEventTypeError) as exc:
            dispatch("Returned", _make_shipment(), 1)
        assert str(exc.value) == "Unknown update type: Returned"

    def test_dispatch_does_not_mutate(self):
        shipment = _make_shipment()
        dispatch(EventType.LOST, shipment, 1)
        assert shipment.status == "created"
        assert shipment.history == []

    def test_every_event_type_has_a_strategy(self):
        assert set(UPDATE_STRATEGIES) == set(EventType)
