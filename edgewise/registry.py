"""Registry mapping host types to their transition engines."""

from __future__ import annotations

import logging
from typing import Any

from edgewise.engine import TransitionEngine
from edgewise.errors import UnknownTriggerError, ValidationError
from edgewise.host import HostAdapter
from edgewise.validator import validate

log = logging.getLogger(__name__)


class MachineRegistry:
    """Declared state machines, keyed by host type."""

    def __init__(self) -> None:
        self._engines: dict[type, TransitionEngine] = {}

    def declare(self, host_type: type, definition: Any, adapter: HostAdapter) -> TransitionEngine:
        """Validate ``definition`` for ``host_type`` and register its engine.

        Nothing is registered if validation fails.
        """
        if host_type in self._engines:
            raise ValidationError(f"`{host_type.__name__}` already declares a state machine")

        model = validate(
            definition,
            type_name=host_type.__name__,
            operations=adapter.operation_names(host_type),
        )
        for state, code in model.states.items():
            adapter.register_scope(host_type, state, code)

        engine = TransitionEngine(model, adapter)
        self._engines[host_type] = engine
        log.debug("Declared state machine %s.%s", host_type.__name__, model.state_field)
        return engine

    def get(self, host_type: type) -> TransitionEngine:
        """Engine for ``host_type`` or the nearest base class that declared one."""
        for klass in host_type.__mro__:
            engine = self._engines.get(klass)
            if engine is not None:
                return engine
        raise UnknownTriggerError(f"`{host_type.__name__}` has no state machine")

    def engine_for(self, entity: Any) -> TransitionEngine:
        return self.get(type(entity))

    def __contains__(self, host_type: type) -> bool:
        return any(klass in self._engines for klass in host_type.__mro__)

    def __len__(self) -> int:
        return len(self._engines)


default_registry = MachineRegistry()


def declare(
    host_type: type,
    definition: Any,
    adapter: HostAdapter,
    registry: MachineRegistry | None = None,
) -> TransitionEngine:
    """Declare a state machine for ``host_type`` on the default registry."""
    target = registry if registry is not None else default_registry
    return target.declare(host_type, definition, adapter)
