"""Entity state cache populated by the warm-up ``get_states`` call."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from .models import EntityState

_LOGGER = logging.getLogger(__name__)


class StateCache:
    """Mapping of entity id to its last known full state record.

    Records are replaced wholesale, never patched field by field.
    """

    def __init__(self) -> None:
        self._states: dict[str, EntityState] = {}
        self._warm = False

    @property
    def is_warm(self) -> bool:
        """True once a full snapshot has been loaded."""
        return self._warm

    def replace_all(self, states: Iterable[Mapping[str, Any] | EntityState]) -> int:
        """Rebuild the cache from a full snapshot.

        The new mapping is built first and swapped in at the end, so a bad
        record leaves the previous contents untouched.

        Returns:
            Number of records loaded.
        """
        rebuilt: dict[str, EntityState] = {}
        for record in states:
            state = record if isinstance(record, EntityState) else EntityState.from_dict(record)
            rebuilt[state.entity_id] = state
        self._states = rebuilt
        self._warm = True
        _LOGGER.debug("State cache loaded with %d entities", len(rebuilt))
        return len(rebuilt)

    def apply(self, state: EntityState) -> None:
        """Replace a single record with a newer snapshot."""
        self._states[state.entity_id] = state

    def get(self, entity_id: str) -> EntityState | None:
        return self._states.get(entity_id)

    def entity_ids(self) -> list[str]:
        return list(self._states)

    def snapshot(self) -> list[dict[str, Any]]:
        """All records in wire form."""
        return [state.to_dict() for state in self._states.values()]

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._states

    def __iter__(self) -> Iterator[EntityState]:
        return iter(list(self._states.values()))

    def __len__(self) -> int:
        return len(self._states)
