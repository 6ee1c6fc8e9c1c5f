"""Constants for hassdaemon_core."""

from __future__ import annotations

from typing import Final

WEBSOCKET_PATH: Final = "/api/websocket"
API_PATH: Final = "/api"
HISTORY_PATH: Final = "/history/period"

DEFAULT_PING_INTERVAL: Final = 20
DEFAULT_CONNECT_TIMEOUT: Final = 15.0
DEFAULT_HTTP_TIMEOUT: Final = 10.0

# Frame types
MSG_AUTH_REQUIRED: Final = "auth_required"
MSG_AUTH: Final = "auth"
MSG_AUTH_OK: Final = "auth_ok"
MSG_AUTH_INVALID: Final = "auth_invalid"
MSG_RESULT: Final = "result"
MSG_EVENT: Final = "event"
MSG_GET_STATES: Final = "get_states"
MSG_SUBSCRIBE_EVENTS: Final = "subscribe_events"
MSG_CALL_SERVICE: Final = "call_service"

EVENT_STATE_CHANGED: Final = "state_changed"

# Entity states
STATE_ON: Final = "on"
STATE_OFF: Final = "off"
STATE_UNAVAILABLE: Final = "unavailable"
STATE_UNKNOWN: Final = "unknown"
STATE_HOME: Final = "home"
STATE_PLAYING: Final = "playing"
STATE_PAUSED: Final = "paused"
