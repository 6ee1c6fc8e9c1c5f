"""Person entities."""

from __future__ import annotations

from collections.abc import Callable

from ..const import STATE_HOME
from ..errors import EntityNotFoundError
from .derivation import ARRIVE, LEAVE, zone_event
from .entity import Entity, EntityListener
from .zone import Zone, presence_name


class Person(Entity):
    """Person whose state is ``home``, ``not_home`` or a zone name.

    Fires ``arrived_home`` and ``left_home``, and per-zone arrive/leave
    events registered through ``on_arrive`` and ``on_leave``.
    """

    KIND = "person"

    @property
    def is_home(self) -> bool:
        return self._state == STATE_HOME

    @property
    def is_away(self) -> bool:
        return self._state != STATE_HOME

    @property
    def device_trackers(self) -> list[str]:
        return list(self._attributes.get("device_trackers", []))

    def _zone_name(self, zone: Zone | str) -> str:
        if isinstance(zone, Zone):
            return zone.presence_name
        state = self._session.get_state(zone)
        if state is None:
            raise EntityNotFoundError(zone)
        return presence_name(zone, state.friendly_name)

    def on_arrive(self, zone: Zone | str, callback: EntityListener) -> Callable[[], None]:
        """Call ``callback`` when this person enters ``zone``.

        Raises:
            EntityNotFoundError: If ``zone`` is an unknown zone id.
        """
        return self._add_listener(zone_event(ARRIVE, self._zone_name(zone)), callback)

    def on_leave(self, zone: Zone | str, callback: EntityListener) -> Callable[[], None]:
        """Call ``callback`` when this person leaves ``zone``."""
        return self._add_listener(zone_event(LEAVE, self._zone_name(zone)), callback)

    def on_arrived_home(self, callback: EntityListener) -> Callable[[], None]:
        return self.on("arrived_home", callback)

    def on_left_home(self, callback: EntityListener) -> Callable[[], None]:
        return self.on("left_home", callback)
