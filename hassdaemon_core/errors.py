"""Client error types for Home Assistant connections."""

from __future__ import annotations


class HassClientError(Exception):
    """Base error for Home Assistant client failures."""


class HassTimeout(HassClientError):
    """Timeout while communicating with Home Assistant."""


class HassConnectionError(HassClientError):
    """Network connection to Home Assistant failed or was lost."""


class HassHandshakeError(HassClientError):
    """WebSocket handshake failed."""


class HassAuthError(HassClientError):
    """Home Assistant rejected the access token."""


class HassProtocolError(HassClientError):
    """A frame did not match the expected message shape."""


class HassResponseError(HassClientError):
    """HTTP response error from the REST API."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class HassCommandError(HassClientError):
    """A command result came back with ``success: false``."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class EntityNotFoundError(HassClientError):
    """The entity id is not present in the state cache."""

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"Entity {entity_id} not found")
        self.entity_id = entity_id
