# shipment_tracker/integrations/file_exchange.py

"""
FILE-EXCHANGE CARRIER (CLIENT SIDE)

Single-slot request/response protocol over two files in a shared directory:

    client writes  <exchange_dir>/client_request.txt
    server writes  <exchange_dir>/server_response.txt, then deletes the request
    client reads the response, then deletes it

Both sides write through write_atomic(), so a reader never sees a partial file.
One outstanding request at a time; concurrent clients are not supported.
"""

import logging
import os
import time
from pathlib import Path
from typing import Union

from shipment_tracker.config import (
    CLIENT_ATTEMPTS,
    CLIENT_INTERVAL_SECONDS,
    EXCHANGE_DIR,
    REQUEST_FILE,
    RESPONSE_FILE,
)
from shipment_tracker.integrations.request_router import route_input

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Timeout waiting for server response"

# The wire carries only the message text; these shapes mark a failed request
FAILURE_PREFIXES = ("Failed to ", "Unknown request format")
FAILURE_SUFFIX = " not found"


def write_atomic(path: Union[str, Path], text: str) -> None:
    """Write text through a temp file + replace."""
    path = str(path)
    tmp_path = f"{path}.tmp"

    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(text)

    os.replace(tmp_path, path)


def is_failure_reply(reply: str) -> bool:
    """True when a server reply reports a rejected request or a timeout."""
    text = reply.strip()
    return (
        text == TIMEOUT_MESSAGE
        or text.startswith(FAILURE_PREFIXES)
        or text.endswith(FAILURE_SUFFIX)
    )


def remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


class FileExchangeClient:
    """Sends one request at a time through the exchange directory."""

    def __init__(
        self,
        exchange_dir: Union[str, Path] = EXCHANGE_DIR,
        attempts: int = CLIENT_ATTEMPTS,
        interval: float = CLIENT_INTERVAL_SECONDS,
    ):
        self.exchange_dir = Path(exchange_dir)
        self.request_path = self.exchange_dir / REQUEST_FILE
        self.response_path = self.exchange_dir / RESPONSE_FILE
        self.attempts = attempts
        self.interval = interval

    def send_raw(self, request: str) -> str:
        """
        Write one CREATE:/UPDATE:/TRACK: request and wait for the answer.

        Returns the server's response text, or the timeout message when no
        response appears within attempts * interval seconds.
        """
        self.exchange_dir.mkdir(parents=True, exist_ok=True)
        # A leftover response belongs to an earlier, abandoned request
        remove_quietly(self.response_path)

        write_atomic(self.request_path, request)
        logger.debug(f"Request written: {request!r}")

        for _ in range(self.attempts):
            if self.response_path.exists():
                response = self.response_path.read_text(encoding="utf-8").strip()
                remove_quietly(self.response_path)
                return response
            time.sleep(self.interval)

        logger.warning(f"No response after {self.attempts} attempts for {request!r}")
        remove_quietly(self.request_path)
        return TIMEOUT_MESSAGE

    def send(self, user_input: str) -> str:
        """
        Route free-form user input and send it.

        Raises:
            ValueError: If the input is a malformed simulation line
        """
        request = route_input(user_input)
        return self.send_raw(request.to_wire())
