# shipment_tracker/async_engine/simulator.py

"""
EVENT REPLAY

Feeds a file of event lines through the tracking service, one line at a
time, the same way a live client would. Lines that fail are recorded and
skipped; replay never stops early.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from shipment_tracker.core.event_parser import read_lines
from shipment_tracker.core.tracking_service import TrackingService

logger = logging.getLogger(__name__)


@dataclass
class ReplaySummary:
    processed: int = 0
    failed: int = 0
    errors: List[Tuple[int, str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.failed


def _is_create_line(line: str) -> bool:
    return line.split(",", 1)[0].strip().lower() == "created"


def replay_lines(
    lines: Iterable[str],
    service: TrackingService,
    delay: float = 0,
) -> ReplaySummary:
    """
    Replay event lines in order.

    Args:
        lines: Raw event lines (blank ones are skipped)
        service: Target tracking service
        delay: Seconds to pause after each accepted line

    Returns:
        ReplaySummary with per-line failures (1-based line numbers)
    """
    summary = ReplaySummary()

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        if _is_create_line(line):
            response = service.create_shipment(line)
        else:
            response = service.update_shipment(line)

        if response.success:
            summary.processed += 1
            if delay > 0:
                time.sleep(delay)
        else:
            summary.failed += 1
            summary.errors.append((line_no, line, response.message))
            logger.warning(f"Replay line {line_no} skipped: {response.message}")

    logger.info(f"Replay finished: {summary.processed} processed, {summary.failed} failed")
    return summary


def replay_file(
    path: Union[str, Path],
    service: TrackingService,
    delay: float = 0,
) -> ReplaySummary:
    """Replay a line file. A missing file replays nothing."""
    return replay_lines(read_lines(path), service, delay=delay)
