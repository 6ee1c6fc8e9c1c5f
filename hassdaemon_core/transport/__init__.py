"""Transport layer for hassdaemon_core.

Components:
- ws: WebSocket connection management
- ws_client: WebSocket message iteration and JSON framing
"""

from .ws import connect_websocket
from .ws_client import HassWsClient, HassWsMessage, HassWsMessageType

__all__ = [
    "HassWsClient",
    "HassWsMessage",
    "HassWsMessageType",
    "connect_websocket",
]
