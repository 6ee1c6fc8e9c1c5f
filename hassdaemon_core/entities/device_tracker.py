"""Device tracker entities."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..const import STATE_HOME
from .entity import Entity

NOTIFY_DOMAIN = "notify"


class DeviceTracker(Entity):
    """Phone or tablet tracked by the companion app."""

    KIND = "device_tracker"

    @property
    def is_home(self) -> bool:
        return self._state == STATE_HOME

    @property
    def notify_service(self) -> str:
        return f"mobile_app_{self.object_id}"

    async def send_notification(
        self,
        message: str,
        *,
        title: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> int:
        """Push a notification through the companion app notify service.

        ``data`` carries platform options (e.g., ``tag``, ``group``,
        ``channel`` on Android or ``url``, ``badge`` on iOS).
        """
        service_data: dict[str, Any] = {"message": message}
        if title is not None:
            service_data["title"] = title
        if data:
            service_data["data"] = dict(data)
        return await self._session.call_service(
            NOTIFY_DOMAIN, self.notify_service, service_data
        )
