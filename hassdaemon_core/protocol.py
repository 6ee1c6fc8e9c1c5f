"""Frame helpers for the Home Assistant WebSocket API.

This module builds outbound JSON frames and validates inbound ones. It holds
no connection state: id assignment belongs to the correlator.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .const import MSG_AUTH, MSG_CALL_SERVICE
from .errors import HassProtocolError


def build_auth(token: str) -> dict[str, Any]:
    """Construct the credential frame.

    Sent in reply to ``auth_required`` before authentication, so it never
    carries an id.
    """
    if not token:
        raise ValueError("access token is required for auth frames")
    return {"type": MSG_AUTH, "access_token": token}


def build_command(msg_type: str, msg_id: int, **fields: Any) -> dict[str, Any]:
    """Build a post-authentication command frame.

    Args:
        msg_type: Command type (e.g., "get_states").
        msg_id: Correlation id assigned by the correlator.
        **fields: Additional top-level fields of the command.

    Returns:
        Frame dict with ``type`` and ``id`` first.
    """
    if isinstance(msg_id, bool) or not isinstance(msg_id, int) or msg_id < 1:
        raise ValueError(f"Command id must be a positive integer, got {msg_id!r}")
    return {"type": msg_type, "id": msg_id, **fields}


def build_service_call(
    domain: str,
    service: str,
    service_data: Mapping[str, Any] | None = None,
    entity_id: str | None = None,
) -> dict[str, Any]:
    """Build the fields of a ``call_service`` command.

    ``target`` is only present when an entity is given; notify-style
    services address no entity.
    """
    if not domain or not service:
        raise ValueError("domain and service are required")
    fields: dict[str, Any] = {"domain": domain, "service": service}
    if service_data:
        fields["service_data"] = dict(service_data)
    if entity_id is not None:
        fields["target"] = {"entity_id": entity_id}
    return fields


def build_call_service(
    msg_id: int,
    domain: str,
    service: str,
    service_data: Mapping[str, Any] | None = None,
    entity_id: str | None = None,
) -> dict[str, Any]:
    """Construct a complete ``call_service`` frame."""
    return build_command(
        MSG_CALL_SERVICE,
        msg_id,
        **build_service_call(domain, service, service_data, entity_id),
    )


def classify(frame: Any) -> str:
    """Return the ``type`` discriminator of a decoded frame.

    Raises:
        HassProtocolError: If the frame is not an object with a string type.
    """
    if not isinstance(frame, Mapping):
        raise HassProtocolError(f"Frame is not an object: {type(frame).__name__}")
    msg_type = frame.get("type")
    if not isinstance(msg_type, str) or not msg_type:
        raise HassProtocolError("Frame is missing a type")
    return msg_type
