"""Exception types raised by edgewise."""

from __future__ import annotations


class StateMachineError(Exception):
    """Base class for every error edgewise raises itself."""


class ValidationError(StateMachineError, ValueError):
    """A machine definition was rejected at declaration time."""


class InvalidTransitionError(StateMachineError):
    """No edge matches the requested action or event from the current state."""


class UnknownTriggerError(StateMachineError, LookupError):
    """The requested action or event was never declared."""


class LockTimeoutError(StateMachineError, TimeoutError):
    """The reference host adapter could not acquire an entity lock in time."""
