"""Live Home Assistant state mirror for automation code."""

__version__ = "0.1.0"

from .correlator import MessageCorrelator
from .entities import (
    BinarySensor,
    Climate,
    DeviceTracker,
    Entity,
    Light,
    MediaPlayer,
    MotionSensor,
    Person,
    Zone,
)
from .errors import (
    EntityNotFoundError,
    HassAuthError,
    HassClientError,
    HassCommandError,
    HassConnectionError,
    HassHandshakeError,
    HassProtocolError,
    HassResponseError,
    HassTimeout,
)
from .history import HistoryAccessor
from .http import HassHttpClient
from .models import CommandResult, EntityState, RemoteEvent, StateChangedData
from .session import ConnectionState, HassSession, initialize
from .state_cache import StateCache

__all__ = [
    "BinarySensor",
    "Climate",
    "CommandResult",
    "ConnectionState",
    "DeviceTracker",
    "Entity",
    "EntityNotFoundError",
    "EntityState",
    "HassAuthError",
    "HassClientError",
    "HassCommandError",
    "HassConnectionError",
    "HassHandshakeError",
    "HassHttpClient",
    "HassProtocolError",
    "HassResponseError",
    "HassSession",
    "HassTimeout",
    "HistoryAccessor",
    "Light",
    "MediaPlayer",
    "MessageCorrelator",
    "MotionSensor",
    "Person",
    "RemoteEvent",
    "StateCache",
    "StateChangedData",
    "Zone",
    "__version__",
    "initialize",
]
