"""Zone entities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..const import STATE_HOME
from .entity import Entity

if TYPE_CHECKING:
    from ..session import HassSession
    from .person import Person

HOME_ZONE = "zone.home"


def presence_name(zone_id: str, friendly_name: str | None) -> str:
    """Name a person's state takes while inside the zone ``zone_id``.

    People in the home zone report ``home`` rather than its friendly name.
    """
    if zone_id == HOME_ZONE:
        return STATE_HOME
    return friendly_name or zone_id


class Zone(Entity):
    """Geographic zone. Its state is the number of people inside."""

    KIND = "zone"

    def __init__(self, session: HassSession, entity_id: str) -> None:
        super().__init__(session, entity_id)
        self._people: dict[str, Person] = {}

    @property
    def presence_name(self) -> str:
        return presence_name(self.entity_id, self.friendly_name)

    @property
    def number_of_people(self) -> int:
        try:
            return int(self._state or 0)
        except ValueError:
            return 0

    @property
    def person_ids(self) -> list[str]:
        return list(self._attributes.get("persons", []))

    @property
    def people(self) -> list[Person]:
        """Person entities currently in the zone.

        Each person is wrapped once per zone and reused on later reads.
        """
        from .person import Person

        people = []
        for person_id in self.person_ids:
            person = self._people.get(person_id)
            if person is None:
                person = self._people[person_id] = Person(self._session, person_id)
            people.append(person)
        return people

    def detach(self) -> None:
        for person in self._people.values():
            person.detach()
        self._people.clear()
        super().detach()
