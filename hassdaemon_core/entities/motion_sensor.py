"""Motion sensor entities."""

from __future__ import annotations

from collections.abc import Callable

from ..const import STATE_ON
from .entity import Entity, EntityListener


class MotionSensor(Entity):
    """Occupancy binary sensor. Fires ``toggle`` plus ``occupied`` or ``clear``."""

    KIND = "motion_sensor"

    @property
    def is_occupied(self) -> bool:
        return self._state == STATE_ON

    def on_motion(self, callback: EntityListener) -> Callable[[], None]:
        return self.on("occupied", callback)

    def on_clear(self, callback: EntityListener) -> Callable[[], None]:
        return self.on("clear", callback)
