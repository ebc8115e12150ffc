"""Tests for the shipment registry: lifecycle, drift and concurrency."""

import threading

import pytest

from shipment_tracker.config import DAY_MS
from shipment_tracker.core.errors import (
    InvalidCreateError,
    ShipmentAlreadyExistsError,
    ShipmentNotFoundError,
    ShipmentTrackingError,
    UnknownEventTypeError,
)
from shipment_tracker.core.event_parser import parse
from shipment_tracker.core.events import EventType
from shipment_tracker.core.registry import ShipmentRegistry
from shipment_tracker.core.shipment import ShipmentCategory

CREATED = 1_652_712_855_468


def _assert_status_matches_history(snapshot):
    assert snapshot.history
    assert snapshot.status == snapshot.history[-1].new_status


class TestCreate:
    def test_create_records_initial_history(self, registry):
        snapshot = registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        assert snapshot.status == "created"
        assert len(snapshot.history) == 1
        assert snapshot.history[0].previous_status == ""
        assert snapshot.history[0].timestamp == CREATED
        _assert_status_matches_history(snapshot)

    def test_default_window(self, registry):
        snapshot = registry.create("s1", "standard", CREATED)
        assert snapshot.expected_delivery_timestamp == CREATED + 7 * DAY_MS

    def test_configurable_default_window(self, hub):
        registry = ShipmentRegistry(hub=hub, default_window_days=2)
        snapshot = registry.create("s1", ShipmentCategory.EXPRESS, CREATED)
        assert snapshot.expected_delivery_timestamp == CREATED + 2 * DAY_MS
        assert not snapshot.is_abnormal

    def test_duplicate_rejected(self, registry):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        with pytest.raises(ShipmentAlreadyExistsError):
            registry.create("s1", ShipmentCategory.BULK, CREATED)
        assert registry.find("s1").category == ShipmentCategory.STANDARD

    def test_unknown_category_string(self, registry):
        with pytest.raises(InvalidCreateError) as exc:
            registry.create("s1", "teleport", CREATED)
        assert isinstance(exc.value, ShipmentTrackingError)
        assert "teleport" in str(exc.value)
        assert "s1" not in registry

    def test_express_default_window_marked_abnormal(self, registry):
        snapshot = registry.create("s1", ShipmentCategory.EXPRESS, CREATED)
        assert snapshot.is_abnormal
        assert "3 day delivery requirement violated" in snapshot.abnormality_reason

    def test_creation_notifies(self, registry, hub, recorder):
        hub.subscribe("s1", recorder)
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        assert len(recorder.calls) == 1
        assert recorder.calls[0][1].new_status == "created"


class TestApply:
    def test_unknown_shipment(self, registry):
        with pytest.raises(ShipmentNotFoundError):
            registry.apply("ghost", EventType.SHIPPED, CREATED)
        assert "ghost" not in registry
        assert registry.find("ghost") is None

    def test_location_sets_location_and_note(self, registry):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        registry.apply("s1", EventType.LOCATION, CREATED + 1, payload="Los Angeles CA")
        snapshot = registry.find("s1")
        assert snapshot.current_location == "Los Angeles CA"
        assert snapshot.notes == ("Location update: Los Angeles CA",)
        assert snapshot.status == "In Transit"
        _assert_status_matches_history(snapshot)

    def test_note_added(self, registry):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        registry.apply("s1", "NoteAdded", CREATED + 1, payload="fragile")
        snapshot = registry.find("s1")
        assert snapshot.notes == ("fragile",)
        assert snapshot.status == "created"
        assert len(snapshot.history) == 2

    def test_unknown_event_type_leaves_shipment_untouched(self, registry):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        with pytest.raises(UnknownEventTypeError):
            registry.apply("s1", "Returned", CREATED + 1)
        assert len(registry.find("s1").history) == 1

    def test_history_is_append_only(self, registry):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        before = registry.find("s1").history
        registry.apply("s1", EventType.SHIPPED, CREATED + 1)
        registry.apply("s1", EventType.DELIVERED, CREATED + 2)
        after = registry.find("s1").history
        assert after[: len(before)] == before
        assert [u.new_status for u in after] == ["created", "Shipped", "Delivered"]

    def test_snapshot_is_detached(self, registry):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        snapshot = registry.find("s1")
        registry.apply("s1", EventType.LOST, CREATED + 1)
        assert snapshot.status == "created"
        assert registry.find("s1").status == "Lost"

    def test_apply_event(self, registry):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        update = registry.apply_event(parse("delivered,s1,500"))
        assert update.new_status == "Delivered"
        assert update.timestamp == 500


class TestDrift:
    def test_express_estimate_slips(self, registry):
        registry.create("s1", ShipmentCategory.EXPRESS, CREATED, CREATED + 2 * DAY_MS)
        assert not registry.find("s1").is_abnormal

        estimate = CREATED + 5 * DAY_MS
        registry.apply_event(parse(f"shipped,s1,{CREATED},{estimate}"))

        snapshot = registry.find("s1")
        assert snapshot.is_abnormal
        assert snapshot.abnormality_reason == "Delivery deadline exceeded"
        assert snapshot.expected_delivery_timestamp == estimate
        assert any("later than the original 3-day window" in n for n in snapshot.notes)
        assert snapshot.history[-1].previous_status == snapshot.history[-1].new_status
        _assert_status_matches_history(snapshot)

    def test_bulk_arrives_early(self, registry):
        registry.create("s1", ShipmentCategory.BULK, CREATED)
        registry.apply("s1", EventType.DELAYED, CREATED + 1, estimated_delivery=CREATED + DAY_MS)
        snapshot = registry.find("s1")
        assert snapshot.abnormality_reason == "Delivered too early"
        assert snapshot.status == "Delayed"

    def test_estimate_within_window_only_moves_expected(self, registry):
        registry.create("s1", ShipmentCategory.OVERNIGHT, CREATED, CREATED + DAY_MS)
        registry.apply("s1", EventType.SHIPPED, CREATED + 1, payload=str(CREATED + DAY_MS - 10))
        snapshot = registry.find("s1")
        assert not snapshot.is_abnormal
        assert snapshot.expected_delivery_timestamp == CREATED + DAY_MS - 10
        assert len(snapshot.history) == 2

    def test_abnormality_is_sticky(self, registry):
        registry.create("s1", ShipmentCategory.EXPRESS, CREATED)
        registry.apply("s1", EventType.SHIPPED, CREATED + 1, estimated_delivery=CREATED + DAY_MS)
        assert registry.find("s1").is_abnormal


class TestNotification:
    def test_one_notification_per_apply(self, registry, hub, recorder):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        hub.subscribe("s1", recorder)
        update = registry.apply("s1", EventType.SHIPPED, CREATED + 1)
        assert recorder.calls == [("s1", update)]

    def test_subscriber_may_read_back(self, registry, hub):
        seen = []
        hub.subscribe("s1", lambda sid, update: seen.append(registry.find(sid).status))
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        registry.apply("s1", EventType.LOST, CREATED + 1)
        assert seen == ["created", "Lost"]


class TestConcurrency:
    def test_same_shipment_updates_do_not_interleave(self, registry):
        registry.create("s1", ShipmentCategory.STANDARD, CREATED)
        threads_count, per_thread = 8, 50

        def worker(n):
            for i in range(per_thread):
                stamp = CREATED + 1 + n * per_thread + i
                registry.apply("s1", EventType.NOTE_ADDED, stamp, payload=f"{n}-{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        snapshot = registry.find("s1")
        total = threads_count * per_thread
        expected_stamps = {CREATED + 1 + k for k in range(total)}
        expected_notes = {f"{n}-{i}" for n in range(threads_count) for i in range(per_thread)}

        applied = snapshot.history[1:]
        assert len(applied) == total
        assert {u.timestamp for u in applied} == expected_stamps
        assert len(snapshot.notes) == total
        assert set(snapshot.notes) == expected_notes
        _assert_status_matches_history(snapshot)

    def test_held_shipment_does_not_block_other_ids(self, registry, hub):
        registry.create("a", ShipmentCategory.STANDARD, CREATED)
        registry.create("b", ShipmentCategory.STANDARD, CREATED)
        entered, release = threading.Event(), threading.Event()

        def slow_subscriber(shipment_id, update):
            entered.set()
            release.wait(5)

        hub.subscribe("a", slow_subscriber)
        holder = threading.Thread(
            target=registry.apply, args=("a", EventType.SHIPPED, CREATED + 1)
        )
        holder.start()
        try:
            assert entered.wait(5)

            done = threading.Event()

            def other():
                registry.apply("b", EventType.DELIVERED, CREATED + 2)
                done.set()

            threading.Thread(target=other).start()
            assert done.wait(5)
            assert registry.find("b").status == "Delivered"
            assert holder.is_alive()
        finally:
            release.set()
            holder.join(5)

        assert registry.find("a").status == "Shipped"

    def test_parallel_creates_on_distinct_ids(self, registry):
        def worker(n):
            for i in range(25):
                registry.create(f"s{n}-{i}", ShipmentCategory.BULK, CREATED)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == 150
        assert len(registry.snapshots()) == 150

    def test_racing_duplicate_creates(self, registry):
        errors = []
        barrier = threading.Barrier(5)

        def worker():
            barrier.wait()
            try:
                registry.create("dup", ShipmentCategory.STANDARD, CREATED)
            except ShipmentAlreadyExistsError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(errors) == 4
        assert len(registry.find("dup").history) == 1
