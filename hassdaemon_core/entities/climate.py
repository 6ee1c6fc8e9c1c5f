"""Climate entities."""

from __future__ import annotations

from typing import Any

from .entity import Entity

CLIMATE_DOMAIN = "climate"


class Climate(Entity):
    """Thermostat or TRV. Fires no semantic events."""

    KIND = "climate"

    @property
    def current_temperature(self) -> float | None:
        return self._attributes.get("current_temperature")

    @property
    def target_temperature(self) -> float | None:
        """Heating setpoint, falling back to the generic target temperature."""
        setpoint = self._attributes.get("current_heating_setpoint")
        if setpoint is not None:
            return setpoint
        return self._attributes.get("temperature")

    @property
    def hvac_modes(self) -> list[str]:
        return list(self._attributes.get("hvac_modes", []))

    async def set_target_temperature(self, temperature: float) -> int:
        return await self.call_service(
            CLIMATE_DOMAIN, "set_temperature", temperature=temperature
        )

    async def set_hvac_mode(self, hvac_mode: str) -> int:
        return await self.call_service(CLIMATE_DOMAIN, "set_hvac_mode", hvac_mode=hvac_mode)

    async def set_preset_mode(self, preset_mode: str, **extra: Any) -> int:
        return await self.call_service(
            CLIMATE_DOMAIN, "set_preset_mode", preset_mode=preset_mode, **extra
        )
