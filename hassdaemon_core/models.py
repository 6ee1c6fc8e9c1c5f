"""Wire data structures for the Home Assistant WebSocket API.

Records are parsed from decoded JSON frames and can be rendered back to the
exact dict they were built from, so nothing received from the remote side is
lost or reshaped on the way through the cache.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .errors import HassCommandError, HassProtocolError

_STATE_KEYS = frozenset(
    {"entity_id", "state", "attributes", "last_changed", "last_updated", "context"}
)


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class EntityState:
    """Full state record of one remote entity.

    Attributes:
        entity_id: Stable entity identifier (e.g., "light.kitchen").
        state: Primary state string.
        attributes: Open mapping of attribute name to value.
        last_changed: ISO timestamp of the last state change, as received.
        last_updated: ISO timestamp of the last state or attribute update.
        context: Optional context block sent by the server.
        extra: Any keys this client does not model, kept verbatim.
    """

    entity_id: str
    state: str
    attributes: dict[str, Any] = field(default_factory=dict)
    last_changed: str | None = None
    last_updated: str | None = None
    context: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EntityState:
        """Parse a state record, raising HassProtocolError on a bad shape."""
        if not isinstance(data, Mapping):
            raise HassProtocolError("State record is not an object")
        entity_id = data.get("entity_id")
        if not isinstance(entity_id, str) or not entity_id:
            raise HassProtocolError("State record is missing entity_id")
        attributes = data.get("attributes", {})
        if not isinstance(attributes, Mapping):
            raise HassProtocolError(f"Attributes of {entity_id} are not an object")
        state = data.get("state", "")
        return cls(
            entity_id=entity_id,
            state=state if isinstance(state, str) else str(state),
            attributes=dict(attributes),
            last_changed=data.get("last_changed"),
            last_updated=data.get("last_updated"),
            context=data.get("context"),
            extra={k: v for k, v in data.items() if k not in _STATE_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the wire representation."""
        result: dict[str, Any] = {
            "entity_id": self.entity_id,
            "state": self.state,
            "attributes": dict(self.attributes),
        }
        if self.last_changed is not None:
            result["last_changed"] = self.last_changed
        if self.last_updated is not None:
            result["last_updated"] = self.last_updated
        if self.context is not None:
            result["context"] = self.context
        result.update(self.extra)
        return result

    @property
    def last_changed_at(self) -> datetime | None:
        """Parsed ``last_changed``."""
        return _parse_timestamp(self.last_changed)

    @property
    def last_updated_at(self) -> datetime | None:
        """Parsed ``last_updated``."""
        return _parse_timestamp(self.last_updated)

    @property
    def friendly_name(self) -> str | None:
        """Human-readable name from the attributes, if any."""
        name = self.attributes.get("friendly_name")
        return name if isinstance(name, str) else None


@dataclass(frozen=True, slots=True)
class RemoteEvent:
    """Event delivered over an event subscription."""

    event_type: str
    data: Any = None
    origin: str | None = None
    time_fired: str | None = None
    context: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RemoteEvent:
        if not isinstance(data, Mapping):
            raise HassProtocolError("Event payload is not an object")
        event_type = data.get("event_type")
        if not isinstance(event_type, str):
            raise HassProtocolError("Event payload is missing event_type")
        return cls(
            event_type=event_type,
            data=data.get("data"),
            origin=data.get("origin"),
            time_fired=data.get("time_fired"),
            context=data.get("context"),
        )

    @property
    def time_fired_at(self) -> datetime | None:
        return _parse_timestamp(self.time_fired)


@dataclass(frozen=True, slots=True)
class StateChangedData:
    """Parsed data of a ``state_changed`` event."""

    entity_id: str
    old_state: EntityState | None
    new_state: EntityState | None

    @classmethod
    def from_event(cls, event: RemoteEvent) -> StateChangedData:
        data = event.data
        if not isinstance(data, Mapping):
            raise HassProtocolError("state_changed event has no data")
        entity_id = data.get("entity_id")
        if not isinstance(entity_id, str):
            raise HassProtocolError("state_changed event is missing entity_id")
        old_raw = data.get("old_state")
        new_raw = data.get("new_state")
        return cls(
            entity_id=entity_id,
            old_state=EntityState.from_dict(old_raw) if old_raw else None,
            new_state=EntityState.from_dict(new_raw) if new_raw else None,
        )


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Parsed ``result`` frame."""

    id: int
    success: bool
    result: Any = None
    error: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CommandResult:
        msg_id = data.get("id")
        if not isinstance(msg_id, int) or isinstance(msg_id, bool):
            raise HassProtocolError("Result frame is missing an integer id")
        return cls(
            id=msg_id,
            success=bool(data.get("success", True)),
            result=data.get("result"),
            error=data.get("error"),
        )

    def raise_for_error(self) -> None:
        """Raise HassCommandError when the command failed."""
        if self.success:
            return
        error = self.error or {}
        raise HassCommandError(
            str(error.get("code", "unknown_error")),
            str(error.get("message", "Command failed")),
        )


ResultCallback = Callable[[CommandResult], Awaitable[None] | None]


@dataclass(slots=True)
class PendingRequest:
    """A sent request waiting for its one result frame."""

    id: int
    on_result: ResultCallback
