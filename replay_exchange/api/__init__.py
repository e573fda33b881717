"""
API layer for the replay exchange.

This module provides REST and WebSocket APIs for order placement,
clock control, price series and trade feeds.
"""

from .rest_api import create_app
from .websocket_api import WebSocketServer
from .validators import validate_order_request, validate_product

__all__ = [
    "create_app",
    "WebSocketServer",
    "validate_order_request",
    "validate_product",
]
