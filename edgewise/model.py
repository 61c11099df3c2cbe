"""Immutable state machine model built by the validator."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType

TransitionHook = Callable[..., object]  # called as hook(from_=..., to=...)


class TriggerKind(Enum):
    ACTION = auto()
    EVENT = auto()


@dataclass(frozen=True)
class TransitionRequest:
    """A single call to perform an action or an event."""

    trigger: str
    kind: TriggerKind

    @property
    def is_event(self) -> bool:
        return self.kind is TriggerKind.EVENT


@dataclass(frozen=True)
class Callbacks:
    in_: bool = False
    post: bool = False


@dataclass(frozen=True)
class Edge:
    from_state: str
    to_state: str
    action: str
    callbacks: Callbacks = field(default_factory=Callbacks)
    on_events: tuple[str, ...] = ()

    def triggered_by(self, event: str) -> bool:
        return event in self.on_events


@dataclass(frozen=True)
class StateMachineModel:
    """Validated machine definition, shared read-only by every entity of a type.

    ``callback_names`` maps every action and event to its
    ``(on_<name>, after_<name>)`` pair so the engine never builds names at
    transition time.
    """

    state_field: str
    states: Mapping[str, int]
    events: tuple[str, ...]
    edges: tuple[Edge, ...]
    on_success: TransitionHook
    on_failure: TransitionHook
    codes: Mapping[int, str] = field(init=False)
    callback_names: Mapping[str, tuple[str, str]] = field(init=False)

    def __post_init__(self) -> None:
        states = MappingProxyType(dict(self.states))
        codes = MappingProxyType({code: name for name, code in states.items()})
        names = {
            name: (f"on_{name}", f"after_{name}")
            for name in [e.action for e in self.edges] + list(self.events)
        }
        # frozen dataclass: bypass __setattr__ for derived fields
        object.__setattr__(self, "states", states)
        object.__setattr__(self, "codes", codes)
        object.__setattr__(self, "callback_names", MappingProxyType(names))

    @property
    def actions(self) -> tuple[str, ...]:
        return tuple(e.action for e in self.edges)

    def state_for(self, code: object) -> str | None:
        """Return the state name stored as ``code``, or None if unknown."""
        if isinstance(code, bool) or not isinstance(code, int):
            return None
        return self.codes.get(code)

    def code_for(self, state: str) -> int:
        return self.states[state]

    def edges_for_action(self, action: str) -> tuple[Edge, ...]:
        return tuple(e for e in self.edges if e.action == action)

    def edges_for_event(self, event: str) -> tuple[Edge, ...]:
        """Edges listing ``event``, in declaration order."""
        return tuple(e for e in self.edges if e.triggered_by(event))

    def select_edge(self, request: TransitionRequest, current: str | None) -> Edge | None:
        """Return the edge ``request`` would take from ``current``, if any."""
        if request.is_event:
            candidates = self.edges_for_event(request.trigger)
        else:
            candidates = self.edges_for_action(request.trigger)
        for edge in candidates:
            if edge.from_state == current:
                return edge
        return None
