"""
HTTP Tracking Client

Talks to the HTTP carrier and always hands back the JSON envelope:
{"success", "message", "shipmentData", "abnormality"}.

Transport failures never raise; they come back as a failed envelope.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from shipment_tracker.config import HTTP_HOST, HTTP_PORT, HTTP_TIMEOUT
from shipment_tracker.integrations.request_router import CREATE, UPDATE, route_input

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = f"http://{HTTP_HOST}:{HTTP_PORT}"


def _failure(message: str) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "shipmentData": None,
        "abnormality": "",
    }


class HttpTrackingClient:
    """Thin requests-based client for /shipments routes."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _call(self, method: str, path: str, body: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(method, url, json=body, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.error(f"Tracking server timeout: {method} {url}")
            return _failure("Request timed out")
        except requests.exceptions.RequestException as e:
            logger.error(f"Tracking server error: {str(e)}")
            return _failure(f"Connection error: {e}")

        # 4xx bodies still carry the envelope
        try:
            data = response.json()
        except ValueError:
            logger.error(f"Non-JSON response ({response.status_code}) from {url}")
            return _failure(f"Invalid response from server (HTTP {response.status_code})")

        if not isinstance(data, dict) or "success" not in data:
            return _failure(f"Unexpected response from server (HTTP {response.status_code})")

        return data

    def create(self, line: str) -> Dict[str, Any]:
        return self._call("POST", "/shipments/create", {"data": line})

    def update(self, line: str) -> Dict[str, Any]:
        return self._call("POST", "/shipments/update", {"data": line})

    def get(self, shipment_id: str) -> Dict[str, Any]:
        return self._call("GET", f"/shipments/{quote(shipment_id.strip(), safe='')}")

    def send(self, user_input: str) -> Dict[str, Any]:
        """
        Route free-form input to the right endpoint.

        Malformed simulation lines are reported as a failed envelope instead
        of being sent.
        """
        try:
            request = route_input(user_input)
        except ValueError as e:
            return _failure(str(e))

        if request.kind == CREATE:
            return self.create(request.data)
        if request.kind == UPDATE:
            return self.update(request.data)
        return self.get(request.data)

    def close(self) -> None:
        self.session.close()
