"""Light entities."""

from __future__ import annotations

from typing import Any

from ..const import STATE_ON
from .entity import Entity

LIGHT_DOMAIN = "light"


class Light(Entity):
    """Dimmable light.

    Fires ``toggle`` plus ``on`` or ``off`` when switched, and
    ``brightness`` when only the brightness attribute moved.
    """

    KIND = "light"

    @property
    def is_on(self) -> bool:
        return self._state == STATE_ON

    @property
    def brightness(self) -> int | None:
        return self._attributes.get("brightness")

    async def toggle(self) -> int:
        return await self.call_service(LIGHT_DOMAIN, "toggle")

    async def turn_on(self, **options: Any) -> int:
        """Turn on with optional ``light.turn_on`` service data."""
        return await self.call_service(LIGHT_DOMAIN, "turn_on", **options)

    async def turn_off(self) -> int:
        return await self.call_service(LIGHT_DOMAIN, "turn_off")

    async def set_brightness(self, brightness: float, transition: float = 1) -> int:
        """Set brightness as a fraction between 0 and 1."""
        if not 0 <= brightness <= 1:
            raise ValueError("brightness must be between 0 and 1")
        return await self.call_service(
            LIGHT_DOMAIN,
            "turn_on",
            brightness_pct=brightness * 100,
            transition=transition,
        )

    async def set_color_temperature(self, kelvin: int) -> int:
        return await self.call_service(LIGHT_DOMAIN, "turn_on", kelvin=kelvin)

    async def play_effect(self, effect: str) -> int:
        return await self.call_service(LIGHT_DOMAIN, "turn_on", effect=effect)
