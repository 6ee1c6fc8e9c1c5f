"""WebSocket connect helper for the Home Assistant API."""

from __future__ import annotations

import asyncio

import websockets
from websockets.asyncio.client import ClientConnection
from websockets.exceptions import (
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from ..const import DEFAULT_CONNECT_TIMEOUT, DEFAULT_PING_INTERVAL
from ..errors import (
    HassConnectionError,
    HassHandshakeError,
    HassTimeout,
)


async def connect_websocket(
    url: str,
    *,
    ping_interval: int | None = DEFAULT_PING_INTERVAL,
    timeout: float = DEFAULT_CONNECT_TIMEOUT,
) -> ClientConnection:
    """Open the Home Assistant API socket at ``url`` (``ws://`` or ``wss://``).

    Frame size is unbounded: a ``get_states`` result carries every
    entity at once. ``ping_interval=None`` turns keepalive pings off.

    Raises:
        HassTimeout: If the handshake does not finish within ``timeout``.
        HassHandshakeError: If the URL is invalid or the upgrade was refused.
        HassConnectionError: For any other socket or protocol failure.
    """
    try:
        return await asyncio.wait_for(
            websockets.connect(
                url,
                ping_interval=ping_interval,
                close_timeout=5,
                max_size=None,
            ),
            timeout=timeout,
        )
    except TimeoutError as err:
        raise HassTimeout("WebSocket connection timed out") from err
    except (InvalidHandshake, InvalidURI) as err:
        raise HassHandshakeError("WebSocket handshake failed") from err
    except (OSError, WebSocketException) as err:
        raise HassConnectionError("WebSocket connection failed") from err
