"""Tests for line-file replay."""

from shipment_tracker.async_engine.simulator import replay_file, replay_lines

LINES = [
    "created,s1,standard,100",
    "",
    "shipped,s1,200",
    "created,s1,standard,300",
    "teleported,s1,400",
    "location,s1,500,Omaha NE",
    "delivered,ghost,600",
]


class TestReplay:
    def test_counts_and_errors(self, service):
        summary = replay_lines(LINES, service)
        assert summary.processed == 3
        assert summary.failed == 3
        assert summary.total == 6
        assert [line_no for line_no, _, _ in summary.errors] == [4, 5, 7]

    def test_continues_after_failures(self, service):
        replay_lines(LINES, service)
        snapshot = service.get_shipment("s1")
        assert snapshot.status == "In Transit"
        assert snapshot.current_location == "Omaha NE"

    def test_replay_file(self, service, tmp_path):
        path = tmp_path / "events.txt"
        path.write_text("\n".join(LINES[:3]) + "\n", encoding="utf-8")
        summary = replay_file(path, service)
        assert summary.processed == 2
        assert summary.failed == 0

    def test_missing_file(self, service, tmp_path):
        summary = replay_file(tmp_path / "missing.txt", service)
        assert summary.total == 0
