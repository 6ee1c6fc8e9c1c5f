"""Typed wrapper around one remote entity.

An entity captures its current record from the session's state cache at
construction time and keeps a private copy refreshed by a delta listener.
On every delta it runs the derivation registered for its ``KIND`` and fires
the resulting semantic events to its own listeners.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from ..callbacks import run_callback
from ..errors import EntityNotFoundError, HassProtocolError
from ..models import EntityState, RemoteEvent, StateChangedData
from .derivation import Derivation, get_derivation

if TYPE_CHECKING:
    from ..session import HassSession

_LOGGER = logging.getLogger(__name__)

EntityListener = Callable[[], Any]


class Entity:
    """Base entity: state, attributes, timestamps, listeners and commands.

    Subclasses set ``KIND`` to pick a derivation and add kind-specific
    properties and commands. They do not override the transition handling.
    """

    KIND: ClassVar[str] = "entity"

    def __init__(self, session: HassSession, entity_id: str) -> None:
        """Wrap ``entity_id``.

        Raises:
            EntityNotFoundError: If the session has not connected yet or the
                id is not in its state cache.
        """
        state = session.get_state(entity_id) if session.has_connected else None
        if state is None:
            raise EntityNotFoundError(entity_id)

        self.entity_id = entity_id
        self._session = session
        self._derivation: Derivation = get_derivation(self.KIND)
        self._listeners: dict[str, list[EntityListener]] = {}

        self._state = ""
        self._attributes: dict[str, Any] = {}
        self._last_changed: datetime | None = None
        self._last_updated: datetime | None = None
        self._capture(state)

        self._remove_delta_listener: Callable[[], None] | None = session.on_state_change(
            entity_id, self._on_delta
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.entity_id}={self._state!r}>"

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> str:
        return self._state

    @property
    def attributes(self) -> Mapping[str, Any]:
        """Read-only view of the current attributes."""
        return MappingProxyType(self._attributes)

    @property
    def last_changed(self) -> datetime | None:
        return self._last_changed

    @property
    def last_updated(self) -> datetime | None:
        return self._last_updated

    @property
    def friendly_name(self) -> str:
        name = self._attributes.get("friendly_name")
        return name if isinstance(name, str) else self.entity_id

    @property
    def object_id(self) -> str:
        """Entity id without its domain prefix."""
        return self.entity_id.partition(".")[2]

    @property
    def session(self) -> HassSession:
        return self._session

    def _capture(self, state: EntityState) -> None:
        self._state = state.state
        self._attributes = copy.deepcopy(state.attributes)
        self._last_changed = state.last_changed_at
        self._last_updated = state.last_updated_at

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def on(self, event: str, callback: EntityListener) -> Callable[[], None]:
        """Register a callback for a semantic event of this entity.

        Returns:
            Function that removes the listener.

        Raises:
            ValueError: If this kind never fires ``event``.
        """
        if event not in self._derivation.events:
            known = ", ".join(sorted(self._derivation.events)) or "none"
            raise ValueError(
                f"{type(self).__name__} has no event {event!r} (events: {known})"
            )
        return self._add_listener(event, callback)

    def _add_listener(self, key: str, callback: EntityListener) -> Callable[[], None]:
        listeners = self._listeners.setdefault(key, [])
        listeners.append(callback)

        def _remove() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return _remove

    def _fire(self, key: str) -> None:
        for callback in list(self._listeners.get(key, ())):
            run_callback(callback)

    def detach(self) -> None:
        """Stop following state changes."""
        if self._remove_delta_listener is not None:
            self._remove_delta_listener()
            self._remove_delta_listener = None

    def _on_delta(self, new_state: EntityState | None, event: RemoteEvent) -> None:
        if new_state is None:
            _LOGGER.debug("%s was removed", self.entity_id)
            return

        try:
            old = StateChangedData.from_event(event).old_state
        except HassProtocolError:
            old = None

        self._capture(new_state)

        try:
            events = self._derivation.run(
                old.state if old is not None else None,
                old.attributes if old is not None else {},
                self._state,
                self._attributes,
            )
        except Exception:
            _LOGGER.exception("Deriving events for %s failed", self.entity_id)
            return

        for name in events:
            _LOGGER.debug("%s fired %s", self.entity_id, name)
            self._fire(name)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def call_service(self, domain: str, service: str, **service_data: Any) -> int:
        """Call a service targeting this entity without waiting for the result."""
        return await self._session.call_service(
            domain, service, service_data or None, self.entity_id
        )

    async def call_service_and_wait(
        self,
        domain: str,
        service: str,
        *,
        timeout: float | None = None,
        **service_data: Any,
    ) -> Any:
        """Call a service targeting this entity and wait for its result."""
        return await self._session.call_service_and_wait(
            domain, service, service_data or None, self.entity_id, timeout=timeout
        )

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    async def history(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[EntityState]:
        """Recorded states between two times."""
        return await self._session.history.history_between(self.entity_id, start, end)

    async def state_at(self, when: datetime) -> str | None:
        """State this entity had at ``when``."""
        return await self._session.history.state_at(self.entity_id, when)
