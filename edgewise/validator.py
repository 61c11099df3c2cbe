"""Machine definition validator.

``validate`` turns a raw definition into a :class:`StateMachineModel` or
raises :class:`ValidationError` for the first problem found.  Checks run in a
fixed order so a definition with a single mistake always reports the same
message.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any

from edgewise.errors import ValidationError
from edgewise.model import Callbacks, Edge, StateMachineModel

log = logging.getLogger(__name__)

MACHINE_KEYS = (
    "states",
    "events",
    "edges",
    "on_successful_transition",
    "on_failed_transition",
)
_EDGE_REQUIRED = {"from", "to", "action", "callbacks"}
_EDGE_OPTIONAL = {"on_events"}
_HOOK_PARAMS = ("from_", "to")

_EDGES_MSG = (
    "`edges` should be a list of dicts, with keys: from, to, action, "
    "callbacks{in: True/False, post: True/False}, on_events (optional)"
)


@dataclass(frozen=True)
class OperationNames:
    """Names the host type already defines.

    ``type_level`` holds zero-argument operations on the type itself (where
    per-state query filters would go); ``instance_level`` holds operations on
    its instances.
    """

    type_level: frozenset[str] = frozenset()
    instance_level: frozenset[str] = frozenset()


def is_identifier(value: Any) -> bool:
    return isinstance(value, str) and value.isidentifier()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_hook(value: Any) -> bool:
    """True for callables taking exactly the keyword arguments ``from_`` and ``to``."""
    if not callable(value):
        return False
    try:
        params = list(inspect.signature(value).parameters.values())
    except (TypeError, ValueError):
        return False
    keyword_kinds = (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
    return (
        len(params) == 2
        and all(p.kind in keyword_kinds for p in params)
        and sorted(p.name for p in params) == sorted(_HOOK_PARAMS)
    )


def validate(
    definition: Any,
    type_name: str = "Entity",
    operations: OperationNames | None = None,
) -> StateMachineModel:
    """Validate a ``{field: machine}`` definition and build its model."""
    operations = operations or OperationNames()

    if not isinstance(definition, dict):
        raise ValidationError("state_machine() has to be called on a dict")
    if len(definition) != 1:
        raise ValidationError("state_machine() has to specify a field and the mappings")
    ((state_field, machine),) = definition.items()
    if not is_identifier(state_field) or not isinstance(machine, dict):
        raise ValidationError("state_machine() has to specify a field and the mappings")
    if set(machine) != set(MACHINE_KEYS):
        raise ValidationError(
            "state_machine() should have (only) the following mappings: "
            + ", ".join(MACHINE_KEYS)
        )

    states = _check_states(machine["states"], type_name, operations)
    events = _check_events(machine["events"], type_name, operations)
    edges = _check_edges(machine["edges"], states, events, type_name, operations)
    _check_generated_names(state_field, states, events, edges)

    for key in ("on_successful_transition", "on_failed_transition"):
        if not _is_hook(machine[key]):
            raise ValidationError(f"`{key}` must be a callable of signature `(from_, to)`")

    model = StateMachineModel(
        state_field=state_field,
        states=states,
        events=events,
        edges=edges,
        on_success=machine["on_successful_transition"],
        on_failure=machine["on_failed_transition"],
    )
    log.debug(
        "Validated %s.%s: %d states, %d events, %d edges",
        type_name, state_field, len(states), len(events), len(edges),
    )
    return model


def _check_states(raw: Any, type_name: str, operations: OperationNames) -> dict[str, int]:
    if not isinstance(raw, dict) or not raw:
        raise ValidationError("`states` does not specify any states")

    codes = list(raw.values())
    well_typed = (
        all(is_identifier(name) for name in raw)
        and all(_is_int(code) and code >= 0 for code in codes)
        and len(set(codes)) == len(codes)
    )
    if not well_typed:
        raise ValidationError("`states` must be a mapping of identifiers to unique ints")

    for name in raw:
        if name in operations.type_level:
            raise ValidationError(
                f"`{name}` is an invalid state name. `{type_name}.{name}` method already exists"
            )
        if f"is_{name}" in operations.instance_level:
            raise ValidationError(
                f"`{name}` is an invalid state name. `{type_name}#is_{name}` method already exists"
            )
    return dict(raw)


def _check_events(raw: Any, type_name: str, operations: OperationNames) -> tuple[str, ...]:
    if not isinstance(raw, list) or not all(is_identifier(e) for e in raw):
        raise ValidationError("`events` should be a list of identifiers")

    for name in raw:
        if name in operations.instance_level:
            raise ValidationError(
                f"`{name}` is not a valid event name. `{type_name}#{name}` method already exists"
            )
    return tuple(dict.fromkeys(raw))


def _check_edges(
    raw: Any,
    states: dict[str, int],
    events: tuple[str, ...],
    type_name: str,
    operations: OperationNames,
) -> tuple[Edge, ...]:
    if not isinstance(raw, list) or not all(isinstance(e, dict) for e in raw):
        raise ValidationError(_EDGES_MSG)
    for edge in raw:
        keys = set(edge)
        if not _EDGE_REQUIRED <= keys or not keys <= _EDGE_REQUIRED | _EDGE_OPTIONAL:
            raise ValidationError(_EDGES_MSG)

    edges: list[Edge] = []
    seen: set[tuple[str, str]] = set()
    for i, raw_edge in enumerate(raw):
        edge = _check_edge(i, raw_edge, states, events, type_name, operations)
        pair = (edge.from_state, edge.to_state)
        if pair in seen:
            raise ValidationError(f"`edges[{i}]` is a duplicate edge")
        seen.add(pair)
        edges.append(edge)
    return tuple(edges)


def _check_generated_names(
    state_field: str,
    states: dict[str, int],
    events: tuple[str, ...],
    edges: tuple[Edge, ...],
) -> None:
    """Reject machines whose own operation names shadow one another."""
    owners: dict[str, str] = {state_field: "the state field"}
    generated = [(f"is_{s}", f"the `{s}` state predicate") for s in states]
    for edge in edges:
        generated.append((edge.action, f"the `{edge.action}` action"))
        generated.append((f"can_{edge.action}", f"the `{edge.action}` action predicate"))
    generated += [(e, f"the `{e}` event") for e in events]

    for name, owner in generated:
        first = owners.setdefault(name, owner)
        if first != owner:
            raise ValidationError(f"`{name}` is ambiguous. It names both {first} and {owner}")


def _check_edge(
    i: int,
    raw: dict[str, Any],
    states: dict[str, int],
    events: tuple[str, ...],
    type_name: str,
    operations: OperationNames,
) -> Edge:
    from_state, to_state = raw["from"], raw["to"]
    if not isinstance(from_state, str) or from_state not in states:
        raise ValidationError(f"`edges[{i}].from` is not a valid state")
    if not isinstance(to_state, str) or to_state not in states:
        raise ValidationError(f"`edges[{i}].to` is not a valid state")

    action = raw["action"]
    if not is_identifier(action):
        raise ValidationError(f"`edges[{i}].action` is not an identifier")
    if action in operations.instance_level:
        raise ValidationError(
            f"`{action}` is an invalid action name. `{type_name}#{action}` method already exists"
        )
    if f"can_{action}" in operations.instance_level:
        raise ValidationError(
            f"`{action}` is an invalid action name. `{type_name}#can_{action}` method already exists"
        )

    callbacks = raw["callbacks"]
    if (
        not isinstance(callbacks, dict)
        or set(callbacks) != {"in", "post"}
        or not all(isinstance(v, bool) for v in callbacks.values())
    ):
        raise ValidationError(f"`edges[{i}].callbacks` must be {{in: True/False, post: True/False}}")

    on_events = raw.get("on_events", [])
    if not isinstance(on_events, list) or not all(is_identifier(e) for e in on_events):
        raise ValidationError(f"`{on_events}` (`edges[{i}].on_events`) is not a valid list of events")
    for j, event in enumerate(on_events):
        if event not in events:
            raise ValidationError(f"`{event}` (`edges[{i}].on_events[{j}]`) is not a registered event")

    return Edge(
        from_state=from_state,
        to_state=to_state,
        action=action,
        callbacks=Callbacks(in_=callbacks["in"], post=callbacks["post"]),
        on_events=tuple(dict.fromkeys(on_events)),
    )
