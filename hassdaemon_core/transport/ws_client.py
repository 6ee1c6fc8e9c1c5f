"""WebSocket client wrapper for the Home Assistant API."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosed

from ..const import DEFAULT_CONNECT_TIMEOUT, DEFAULT_PING_INTERVAL
from ..errors import HassConnectionError, HassProtocolError
from .ws import connect_websocket

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class HassWsMessageType(Enum):
    """Normalized WebSocket message types."""

    TEXT = "text"
    CLOSED = "closed"
    ERROR = "error"


@dataclass(frozen=True)
class HassWsMessage:
    """Normalized WebSocket message payload."""

    type: HassWsMessageType
    data: str | None = None


class HassWsClient:
    """Wrapper around the websockets client connection."""

    def __init__(self) -> None:
        self._ws: ClientConnection | None = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    async def connect(
        self,
        url: str,
        *,
        ping_interval: int | None = DEFAULT_PING_INTERVAL,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        """Connect to the API websocket."""
        self._ws = await connect_websocket(
            url,
            ping_interval=ping_interval,
            timeout=timeout,
        )

    async def close(self) -> None:
        """Close the websocket connection."""
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()

    async def send_json(self, payload: dict[str, Any]) -> None:
        """Send a JSON payload to the websocket."""
        if self._ws is None:
            raise HassConnectionError("WebSocket is not connected")
        try:
            await self._ws.send(json.dumps(payload))
        except ConnectionClosed as err:
            raise HassConnectionError("WebSocket closed while sending") from err

    def __aiter__(self) -> AsyncIterator[HassWsMessage]:
        if self._ws is None:
            raise HassConnectionError("WebSocket is not connected")
        return self._iter_messages()

    async def _iter_messages(self) -> AsyncIterator[HassWsMessage]:
        if self._ws is None:
            raise HassConnectionError("WebSocket is not connected")

        try:
            async for msg in self._ws:
                normalized = self._normalize_message(msg)
                if normalized is None:
                    continue
                yield normalized
        except ConnectionClosed:
            yield HassWsMessage(type=HassWsMessageType.CLOSED)
        except Exception:
            yield HassWsMessage(type=HassWsMessageType.ERROR)
        else:
            # Normal iteration completion means the peer closed gracefully.
            yield HassWsMessage(type=HassWsMessageType.CLOSED)

    @staticmethod
    def _normalize_message(msg: Any) -> HassWsMessage | None:
        """Normalize a received frame; binary frames are skipped."""
        if isinstance(msg, (bytes, bytearray, memoryview)):
            return None
        return HassWsMessage(HassWsMessageType.TEXT, str(msg))

    @staticmethod
    def decode_json(message: HassWsMessage) -> Any:
        """Decode a TEXT message payload into JSON."""
        if message.type is not HassWsMessageType.TEXT:
            raise HassProtocolError("Only TEXT messages can be decoded")
        if not isinstance(message.data, str):
            raise HassProtocolError("Message data is not a string")
        try:
            return json.loads(message.data)
        except ValueError as err:
            raise HassProtocolError(f"Frame is not valid JSON: {err}") from err
