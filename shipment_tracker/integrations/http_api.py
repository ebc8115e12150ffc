"""
HTTP carrier for the tracking service.

Routes:
    POST /shipments/create   {"data": "<raw line>"}
    POST /shipments/update   {"data": "<raw line>"}
    GET  /shipments/{id}
    GET  /health

Every shipment route answers with the
{"success", "message", "shipmentData", "abnormality"} envelope. Handlers are
plain (sync) functions, so FastAPI runs them on its worker thread pool.
"""

import logging
import threading
from typing import Tuple

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shipment_tracker.config import HTTP_HOST, HTTP_PORT
from shipment_tracker.core.tracking_service import (
    ERROR_ALREADY_EXISTS,
    ERROR_NOT_FOUND,
    TrackingResponse,
    TrackingService,
)

logger = logging.getLogger(__name__)


# ── Request Models ────────────────────────────────

class ShipmentLineRequest(BaseModel):
    data: str


def _status_code(response: TrackingResponse) -> int:
    if response.success:
        return 200
    if response.error == ERROR_NOT_FOUND:
        return 404
    if response.error == ERROR_ALREADY_EXISTS:
        return 409
    return 400


def _envelope(response: TrackingResponse) -> JSONResponse:
    return JSONResponse(status_code=_status_code(response), content=response.to_dict())


def create_app(service: TrackingService) -> FastAPI:
    """Build the FastAPI application around one tracking service."""
    app = FastAPI(title="Shipment Tracker")
    app.state.service = service

    @app.post("/shipments/create")
    def create_shipment(req: ShipmentLineRequest):
        """Create a shipment from a created,<id>,<category>,<timestamp> line."""
        return _envelope(service.create_shipment(req.data))

    @app.post("/shipments/update")
    def update_shipment(req: ShipmentLineRequest):
        """Apply one <type>,<id>,<timestamp>[,<payload>] event."""
        return _envelope(service.update_shipment(req.data))

    @app.get("/shipments/{shipment_id}")
    def get_shipment(shipment_id: str):
        snapshot = service.get_shipment(shipment_id)
        if snapshot is None:
            return _envelope(TrackingResponse(
                success=False,
                message=f"Shipment {shipment_id} not found",
                error=ERROR_NOT_FOUND,
            ))
        return _envelope(TrackingResponse(
            success=True,
            message=f"Shipment {shipment_id} found",
            shipment=snapshot,
            abnormality=snapshot.abnormality_reason if snapshot.is_abnormal else "",
        ))

    @app.get("/health")
    def health():
        return {"status": "ok", "shipments": len(service.registry)}

    return app


def run_server(service: TrackingService, host: str = HTTP_HOST, port: int = HTTP_PORT) -> None:
    """Serve the HTTP carrier in the foreground."""
    logger.info(f"HTTP carrier listening on http://{host}:{port}")
    uvicorn.run(create_app(service), host=host, port=port, log_level="info")


def serve_in_background(
    service: TrackingService,
    host: str = HTTP_HOST,
    port: int = HTTP_PORT,
) -> Tuple[uvicorn.Server, threading.Thread]:
    """Start the HTTP carrier on a daemon thread (used by the dashboard)."""
    config = uvicorn.Config(create_app(service), host=host, port=port, log_level="warning")
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, name="http-carrier", daemon=True)
    thread.start()
    logger.info(f"HTTP carrier started in background on http://{host}:{port}")
    return server, thread
