"""Transition engine: resolve an action or event against current state and apply it."""

from __future__ import annotations

import logging
from typing import Any

from edgewise.errors import InvalidTransitionError, UnknownTriggerError
from edgewise.host import HostAdapter
from edgewise.model import Edge, StateMachineModel, TransitionRequest, TriggerKind

log = logging.getLogger(__name__)

INVALID_ACTION_MSG = "Invalid state transition"
INVALID_EVENT_MSG = "No valid transitions"


class TransitionEngine:
    """Runs transitions for every entity of one host type.

    The engine holds no per-entity state; all of it lives behind the
    adapter, so one instance is shared across threads.
    """

    def __init__(self, model: StateMachineModel, adapter: HostAdapter) -> None:
        self.model = model
        self.adapter = adapter

    def read_state(self, entity: Any) -> str | None:
        """Symbolic state of ``entity``; None when no known code is stored."""
        return self.model.state_for(self.adapter.read_raw_state(entity))

    def can(self, entity: Any, action: str) -> bool:
        """True if ``action`` is possible from the entity's current state."""
        self._check_action(action)
        current = self.read_state(entity)
        return any(e.from_state == current for e in self.model.edges_for_action(action))

    def perform_action(self, entity: Any, action: str) -> None:
        self._check_action(action)
        self._transition(entity, TransitionRequest(action, TriggerKind.ACTION))

    def perform_event(self, entity: Any, event: str) -> None:
        if event not in self.model.events:
            raise UnknownTriggerError(f"`{event}` is not a declared event")
        self._transition(entity, TransitionRequest(event, TriggerKind.EVENT))

    def _check_action(self, action: str) -> None:
        if action not in self.model.actions:
            raise UnknownTriggerError(f"`{action}` is not a declared action")

    def _transition(self, entity: Any, request: TransitionRequest) -> None:
        with self.adapter.exclusive_lock(entity):
            current = self.read_state(entity)
            edge = self.model.select_edge(request, current)
            if edge is None:
                log.warning(
                    "Refused transition: %s + %s (%s)",
                    current, request.trigger, request.kind.name.lower(),
                )
                self.model.on_failure(from_=current, to=current)
                raise InvalidTransitionError(
                    INVALID_EVENT_MSG if request.is_event else INVALID_ACTION_MSG
                )
            self._apply(entity, edge, request)

    def _apply(self, entity: Any, edge: Edge, request: TransitionRequest) -> None:
        names = self.model.callback_names
        hooks = [names[edge.action]]
        if request.is_event:
            hooks.append(names[request.trigger])

        if edge.callbacks.in_:
            for on_name, _ in hooks:
                self.adapter.invoke_callback(entity, on_name)

        self.adapter.write_raw_state(entity, self.model.code_for(edge.to_state))
        self.adapter.mark_modified(entity)

        if edge.callbacks.post:
            for _, after_name in hooks:
                self.adapter.invoke_callback(entity, after_name)

        log.info("Transition: %s + %s -> %s", edge.from_state, request.trigger, edge.to_state)
        self.model.on_success(from_=edge.from_state, to=edge.to_state)
