"""
Integrations Package

Client and server carriers: HTTP (FastAPI/requests) and file exchange.
"""

from shipment_tracker.integrations.request_router import ClientRequest, route_input
from shipment_tracker.integrations.file_exchange import FileExchangeClient
from shipment_tracker.integrations.http_client import HttpTrackingClient

__all__ = [
    'ClientRequest',
    'route_input',
    'FileExchangeClient',
    'HttpTrackingClient',
]
