"""Typed entity wrappers."""

from .binary_sensor import BinarySensor
from .climate import Climate
from .derivation import Derivation, Transition, get_derivation, register_derivation
from .device_tracker import DeviceTracker
from .entity import Entity
from .light import Light
from .media_player import MediaPlayer
from .motion_sensor import MotionSensor
from .person import Person
from .zone import Zone

__all__ = [
    "BinarySensor",
    "Climate",
    "Derivation",
    "DeviceTracker",
    "Entity",
    "Light",
    "MediaPlayer",
    "MotionSensor",
    "Person",
    "Transition",
    "Zone",
    "get_derivation",
    "register_derivation",
]
