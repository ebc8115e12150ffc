"""
Shipment Tracker

In-memory shipment registry with pluggable carriers (HTTP, file exchange)
and live observers.
"""

__version__ = "0.1.0"
