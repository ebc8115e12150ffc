"""
TRACKER CONFIGURATION

All runtime settings come from environment variables with safe local
defaults. Only entry points call configure_logging().
"""

import logging
import os

DAY_MS = 24 * 60 * 60 * 1000

# ==================================================
# HTTP CARRIER
# ==================================================

HTTP_HOST = os.getenv("TRACKER_HTTP_HOST", "127.0.0.1")
HTTP_PORT = int(os.getenv("TRACKER_HTTP_PORT", "8080"))
HTTP_TIMEOUT = float(os.getenv("TRACKER_HTTP_TIMEOUT", "5"))  # seconds

# ==================================================
# FILE-EXCHANGE CARRIER
# ==================================================

EXCHANGE_DIR = os.getenv("TRACKER_EXCHANGE_DIR", ".")
REQUEST_FILE = os.getenv("TRACKER_REQUEST_FILE", "client_request.txt")
RESPONSE_FILE = os.getenv("TRACKER_RESPONSE_FILE", "server_response.txt")
POLL_INTERVAL_SECONDS = float(os.getenv("TRACKER_POLL_INTERVAL", "0.05"))
CLIENT_ATTEMPTS = int(os.getenv("TRACKER_CLIENT_ATTEMPTS", "50"))
CLIENT_INTERVAL_SECONDS = float(os.getenv("TRACKER_CLIENT_INTERVAL", "0.1"))

# ==================================================
# DELIVERY POLICY
# ==================================================

DEFAULT_WINDOW_DAYS = int(os.getenv("TRACKER_DEFAULT_WINDOW_DAYS", "7"))

LOG_LEVEL = os.getenv("TRACKER_LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging once for a process entry point."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
