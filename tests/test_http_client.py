"""Tests for the requests-based tracking client (session mocked)."""

from unittest.mock import MagicMock

import requests

from shipment_tracker.integrations.http_client import HttpTrackingClient

ENVELOPE = {"success": True, "message": "ok", "shipmentData": None, "abnormality": ""}


def _client(payload=ENVELOPE, status_code=200):
    session = MagicMock(spec=requests.Session)
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    session.request.return_value = response
    return HttpTrackingClient("http://tracker:9000/", timeout=2, session=session), session


class TestRouting:
    def test_create(self):
        client, session = _client()
        assert client.send("created,s1,express,100") == ENVELOPE
        session.request.assert_called_once_with(
            "POST",
            "http://tracker:9000/shipments/create",
            json={"data": "created,s1,express,100"},
            timeout=2,
        )

    def test_update(self):
        client, session = _client()
        client.send("lost,s1,100")
        args, kwargs = session.request.call_args
        assert args == ("POST", "http://tracker:9000/shipments/update")
        assert kwargs["json"] == {"data": "lost,s1,100"}

    def test_track(self):
        client, session = _client()
        client.send("s1")
        session.request.assert_called_once_with(
            "GET", "http://tracker:9000/shipments/s1", json=None, timeout=2
        )

    def test_malformed_line_is_not_sent(self):
        client, session = _client()
        result = client.send("created,s1,express")
        assert result["success"] is False
        session.request.assert_not_called()


class TestFailures:
    def test_error_envelope_passes_through(self):
        failure = {"success": False, "message": "Shipment s1 not found", "shipmentData": None, "abnormality": ""}
        client, _ = _client(failure, status_code=404)
        assert client.get("s1") == failure

    def test_timeout(self, caplog):
        client, session = _client()
        session.request.side_effect = requests.exceptions.Timeout()
        result = client.get("s1")
        assert result["success"] is False
        assert result["message"] == "Request timed out"

    def test_connection_error(self):
        client, session = _client()
        session.request.side_effect = requests.exceptions.ConnectionError("refused")
        result = client.create("created,s1,bulk,1")
        assert result["success"] is False
        assert "refused" in result["message"]

    def test_non_json_body(self):
        client, session = _client(status_code=502)
        session.request.return_value.json.side_effect = ValueError("no json")
        result = client.get("s1")
        assert result["success"] is False
        assert "502" in result["message"]
