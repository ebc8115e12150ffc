# shipment_tracker/async_engine/file_watcher.py

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from shipment_tracker.config import (
    EXCHANGE_DIR,
    POLL_INTERVAL_SECONDS,
    REQUEST_FILE,
    RESPONSE_FILE,
)
from shipment_tracker.core.tracking_service import TrackingService
from shipment_tracker.integrations.file_exchange import remove_quietly, write_atomic

logger = logging.getLogger(__name__)


# ==================================================
# WATCHER
# ==================================================

class FileExchangeWatcher:
    """
    Server side of the file-exchange carrier.

    Polls the exchange directory for a request file, hands its content to
    TrackingService.handle_request, writes the response and removes the
    request. A failed cycle is logged and the loop keeps running.
    """

    def __init__(
        self,
        service: TrackingService,
        exchange_dir: Union[str, Path] = EXCHANGE_DIR,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ):
        self.service = service
        self.exchange_dir = Path(exchange_dir)
        self.request_path = self.exchange_dir / REQUEST_FILE
        self.response_path = self.exchange_dir / RESPONSE_FILE
        self.poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> Optional[str]:
        """
        Serve at most one pending request.

        Returns:
            The response written, or None when no request was waiting
        """
        if not self.request_path.exists():
            return None

        # A blank request is still answered so the slot is freed
        request = self.request_path.read_text(encoding="utf-8").strip()

        logger.info(f"File request: {request!r}")
        response = self.service.handle_request(request)

        write_atomic(self.response_path, response)
        remove_quietly(self.request_path)
        return response

    def _loop(self) -> None:
        logger.info(f"File-exchange watcher started on {self.exchange_dir}")

        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception:
                logger.exception("File-exchange cycle failed")
            self._stop.wait(self.poll_interval)

        logger.info("File-exchange watcher stopped")

    def start(self) -> None:
        if self.running:
            return
        self.exchange_dir.mkdir(parents=True, exist_ok=True)
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="file-exchange-watcher", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def serve_forever(self) -> None:
        """Run the loop on the calling thread until stop() or Ctrl+C."""
        self._stop.clear()
        try:
            self._loop()
        except KeyboardInterrupt:
            logger.info("File-exchange watcher interrupted")
