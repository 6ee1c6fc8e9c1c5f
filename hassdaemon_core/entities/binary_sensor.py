"""Binary sensor entities."""

from __future__ import annotations

from ..const import STATE_OFF, STATE_ON
from .entity import Entity


class BinarySensor(Entity):
    """Two-valued sensor. Fires ``toggle`` plus ``on`` or ``off``."""

    KIND = "binary_sensor"

    @property
    def is_on(self) -> bool:
        return self._state == STATE_ON

    @property
    def is_off(self) -> bool:
        return self._state == STATE_OFF
