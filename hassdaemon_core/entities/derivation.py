"""Semantic event derivation per entity kind.

Each kind registers one ``Derivation``: a pure function from a state
transition to the names of the semantic events it implies. A derivation
declares the attribute keys it compares (``reads``); attributes are projected
onto those keys before the function sees them, so a derivation cannot depend
on anything it did not declare. The result depends only on the old and new
states, never on how many times a transition has been seen.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..const import (
    STATE_HOME,
    STATE_OFF,
    STATE_ON,
    STATE_PAUSED,
    STATE_PLAYING,
    STATE_UNAVAILABLE,
    STATE_UNKNOWN,
)

ARRIVE = "arrive"
LEAVE = "leave"


@dataclass(frozen=True, slots=True)
class Transition:
    """Old and new state of one entity, attributes already projected."""

    old_state: str | None
    old_attributes: Mapping[str, Any]
    new_state: str
    new_attributes: Mapping[str, Any]

    @property
    def state_changed(self) -> bool:
        return self.old_state != self.new_state

    def attribute_changed(self, key: str) -> bool:
        return self.old_attributes.get(key) != self.new_attributes.get(key)


DeriveFunc = Callable[[Transition], Iterable[str]]


@dataclass(frozen=True)
class Derivation:
    """Event derivation strategy for one entity kind.

    Attributes:
        kind: Kind tag the strategy is registered under.
        derive: Pure function returning the events implied by a transition.
        reads: Attribute keys the function compares.
        events: Event names listeners may register for.
    """

    kind: str
    derive: DeriveFunc
    reads: frozenset[str] = frozenset()
    events: frozenset[str] = frozenset()

    def project(self, attributes: Mapping[str, Any]) -> dict[str, Any]:
        return {key: attributes[key] for key in self.reads if key in attributes}

    def run(
        self,
        old_state: str | None,
        old_attributes: Mapping[str, Any],
        new_state: str,
        new_attributes: Mapping[str, Any],
    ) -> list[str]:
        transition = Transition(
            old_state=old_state,
            old_attributes=self.project(old_attributes),
            new_state=new_state,
            new_attributes=self.project(new_attributes),
        )
        return list(self.derive(transition))


_DERIVATIONS: dict[str, Derivation] = {}


def register_derivation(derivation: Derivation) -> Derivation:
    """Register a derivation under its kind tag, replacing any previous one."""
    _DERIVATIONS[derivation.kind] = derivation
    return derivation


def get_derivation(kind: str) -> Derivation:
    try:
        return _DERIVATIONS[kind]
    except KeyError:
        raise LookupError(f"No event derivation registered for kind {kind!r}") from None


def zone_event(action: str, zone_name: str) -> str:
    """Event name for arriving at or leaving a named zone."""
    return f"{action}:{zone_name}"


def _no_events(transition: Transition) -> Iterable[str]:
    return ()


def _two_state(on_event: str, off_event: str) -> DeriveFunc:
    """Toggle-style derivation for on/off entities."""

    def derive(transition: Transition) -> Iterable[str]:
        if transition.old_state == STATE_UNAVAILABLE or not transition.state_changed:
            return ()
        events = ["toggle"]
        if transition.new_state == STATE_ON:
            events.append(on_event)
        elif transition.new_state == STATE_OFF:
            events.append(off_event)
        return events

    return derive


_binary = _two_state("on", "off")


def _derive_light(transition: Transition) -> Iterable[str]:
    if transition.old_state == STATE_UNAVAILABLE:
        return ()
    if transition.state_changed:
        return _binary(transition)
    if transition.attribute_changed("brightness"):
        return ("brightness",)
    return ()


def _derive_presence(transition: Transition) -> Iterable[str]:
    old, new = transition.old_state, transition.new_state
    if old in (STATE_UNKNOWN, STATE_UNAVAILABLE) or not transition.state_changed:
        return ()
    events: list[str] = []
    if new == STATE_HOME:
        events.append("arrived_home")
    elif old == STATE_HOME:
        events.append("left_home")
    events.append(zone_event(ARRIVE, new))
    if old is not None:
        events.append(zone_event(LEAVE, old))
    return events


def _derive_media(transition: Transition) -> Iterable[str]:
    if transition.old_state == STATE_UNAVAILABLE:
        return ()
    events: list[str] = []
    if transition.state_changed:
        if transition.new_state == STATE_PLAYING:
            events.append("play")
        elif transition.new_state == STATE_PAUSED:
            events.append("pause")
    if transition.attribute_changed("media_title") or transition.attribute_changed(
        "media_artist"
    ):
        events.append("song_change")
    if transition.attribute_changed("volume_level"):
        events.append("volume_change")
    if transition.attribute_changed("media_position"):
        events.append("seek")
    return events


GENERIC = register_derivation(Derivation(kind="entity", derive=_no_events))

BINARY_SENSOR = register_derivation(
    Derivation(
        kind="binary_sensor",
        derive=_binary,
        events=frozenset({"toggle", "on", "off"}),
    )
)

MOTION_SENSOR = register_derivation(
    Derivation(
        kind="motion_sensor",
        derive=_two_state("occupied", "clear"),
        events=frozenset({"toggle", "occupied", "clear"}),
    )
)

LIGHT = register_derivation(
    Derivation(
        kind="light",
        derive=_derive_light,
        reads=frozenset({"brightness"}),
        events=frozenset({"toggle", "on", "off", "brightness"}),
    )
)

PERSON = register_derivation(
    Derivation(
        kind="person",
        derive=_derive_presence,
        events=frozenset({"arrived_home", "left_home"}),
    )
)

MEDIA_PLAYER = register_derivation(
    Derivation(
        kind="media_player",
        derive=_derive_media,
        reads=frozenset({"media_title", "media_artist", "volume_level", "media_position"}),
        events=frozenset({"play", "pause", "song_change", "volume_change", "seek"}),
    )
)

ZONE = register_derivation(Derivation(kind="zone", derive=_no_events))
CLIMATE = register_derivation(Derivation(kind="climate", derive=_no_events))
DEVICE_TRACKER = register_derivation(Derivation(kind="device_tracker", derive=_no_events))
