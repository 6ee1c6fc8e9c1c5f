"""Pytest configuration and fixtures for hassdaemon_core tests."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hassdaemon_core import HassSession
from hassdaemon_core.transport import HassWsClient, HassWsMessage, HassWsMessageType

TIMESTAMP = "2024-06-01T12:00:00.000000+00:00"


def make_state(entity_id: str, state: str, **attributes: Any) -> dict[str, Any]:
    """Build a wire-format state record."""
    return {
        "entity_id": entity_id,
        "state": state,
        "attributes": attributes,
        "last_changed": TIMESTAMP,
        "last_updated": TIMESTAMP,
        "context": {"id": "01HZX", "parent_id": None, "user_id": None},
    }


INITIAL_STATES = [
    make_state("light.kitchen", "off", friendly_name="Kitchen", brightness=None),
    make_state("binary_sensor.front_door", "off", friendly_name="Front Door"),
    make_state("binary_sensor.hallway_motion", "off", device_class="motion"),
    make_state(
        "person.alex",
        "home",
        friendly_name="Alex",
        device_trackers=["device_tracker.alex_phone"],
    ),
    make_state("zone.home", "1", friendly_name="Home", persons=["person.alex"]),
    make_state("zone.office", "0", friendly_name="Office", persons=[]),
    make_state(
        "media_player.living_room",
        "idle",
        friendly_name="Living Room",
        volume_level=0.3,
    ),
    make_state(
        "climate.bedroom",
        "heat",
        current_temperature=19.5,
        temperature=21.0,
        hvac_modes=["off", "heat"],
    ),
    make_state("device_tracker.alex_phone", "home", source_type="gps"),
]


def state_changed_frame(
    subscription_id: int,
    entity_id: str,
    old: dict[str, Any] | None,
    new: dict[str, Any] | None,
) -> dict[str, Any]:
    """Build an event frame carrying one state_changed event."""
    return {
        "type": "event",
        "id": subscription_id,
        "event": {
            "event_type": "state_changed",
            "data": {"entity_id": entity_id, "old_state": old, "new_state": new},
            "origin": "LOCAL",
            "time_fired": TIMESTAMP,
            "context": {"id": "01HZY"},
        },
    }


class FakeWsClient:
    """Stand-in for HassWsClient fed from a queue of messages."""

    decode_json = staticmethod(HassWsClient.decode_json)

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.connect = AsyncMock()
        self.closed = False
        self._inbox: asyncio.Queue[HassWsMessage] = asyncio.Queue()

    @property
    def is_open(self) -> bool:
        return not self.closed

    async def send_json(self, payload: dict[str, Any]) -> None:
        self.sent.append(payload)

    async def close(self) -> None:
        self.closed = True

    def feed(self, frame: dict[str, Any]) -> None:
        self.feed_text(json.dumps(frame))

    def feed_text(self, text: str) -> None:
        self._inbox.put_nowait(HassWsMessage(HassWsMessageType.TEXT, text))

    def end(self) -> None:
        """Simulate the server closing the connection."""
        self._inbox.put_nowait(HassWsMessage(HassWsMessageType.CLOSED))

    def __aiter__(self):
        return self._iter_messages()

    async def _iter_messages(self):
        while True:
            msg = await self._inbox.get()
            yield msg
            if msg.type is not HassWsMessageType.TEXT:
                return


async def settle(rounds: int = 10) -> None:
    """Let the listener task and scheduled callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def complete_handshake(
    session: HassSession,
    fake_ws: FakeWsClient,
    states: list[dict[str, Any]] | None = None,
) -> int:
    """Drive a session through auth, warm-up and subscription.

    Returns:
        Id of the event subscription.
    """
    await session._handle_message({"type": "auth_required", "ha_version": "2024.6.0"})
    await session._handle_message({"type": "auth_ok", "ha_version": "2024.6.0"})
    get_states = fake_ws.sent[-1]
    await session._handle_message(
        {
            "type": "result",
            "id": get_states["id"],
            "success": True,
            "result": INITIAL_STATES if states is None else states,
        }
    )
    subscribe = fake_ws.sent[-1]
    await session._handle_message(
        {"type": "result", "id": subscribe["id"], "success": True, "result": None}
    )
    return subscribe["id"]


@pytest.fixture
def fake_ws() -> FakeWsClient:
    return FakeWsClient()


@pytest.fixture
async def session(fake_ws: FakeWsClient):
    """Session connected to a fake transport, not yet authenticated."""
    with patch("hassdaemon_core.session.HassWsClient", return_value=fake_ws):
        hass = HassSession("hass.local:8123", "secret-token")
        await hass.connect()
        yield hass
        await hass.close()


@pytest.fixture
async def ready_session(session: HassSession, fake_ws: FakeWsClient) -> HassSession:
    """Session that has completed the handshake with INITIAL_STATES."""
    await complete_handshake(session, fake_ws)
    return session


@pytest.fixture
def subscription_id(ready_session: HassSession) -> int:
    return ready_session._subscription_id


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
    text_data: str | None = None,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        json_data: Data to return from json() call
        text_data: Data to return from text() call

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status

    if json_data is not None:
        response.json.return_value = json_data
    if text_data is not None:
        response.text.return_value = text_data

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response
