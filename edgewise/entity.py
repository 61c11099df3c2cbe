"""Attribute-style access to a declared state machine.

Subclasses of :class:`Stateful` get, for a machine declared on field
``state``::

    order.state          # symbolic state, None if uninitialized
    order.is_placed()    # state predicate
    order.ship()         # action
    order.can_ship()     # action predicate
    order.paid()         # event

Nothing is generated on the class; each lookup goes through the registry.
"""

from __future__ import annotations

from functools import partial
from typing import Any, ClassVar

from edgewise.engine import TransitionEngine
from edgewise.errors import UnknownTriggerError
from edgewise.registry import MachineRegistry, default_registry


class Stateful:
    registry: ClassVar[MachineRegistry] = default_registry

    @classmethod
    def state_machine(cls) -> TransitionEngine:
        return cls.registry.get(cls)

    def __getattr__(self, name: str) -> Any:
        # private names (raw state, locks) must fall through to AttributeError
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            engine = type(self).state_machine()
        except UnknownTriggerError:
            raise AttributeError(name) from None

        model = engine.model
        if name == model.state_field:
            return engine.read_state(self)
        if name in model.actions:
            return partial(engine.perform_action, self, name)
        if name in model.events:
            return partial(engine.perform_event, self, name)
        if name.startswith("can_") and name[4:] in model.actions:
            return partial(engine.can, self, name[4:])
        if name.startswith("is_") and name[3:] in model.states:
            state = name[3:]
            return lambda: engine.read_state(self) == state
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
