"""Host adapter port and a reference implementation for plain Python objects.

The engine never touches an entity directly.  Everything durable (reading and
writing the raw state code, touch bookkeeping, locking, named callbacks) goes
through a :class:`HostAdapter`.  Persistence layers implement the protocol;
:class:`AttributeHostAdapter` keeps state on instance attributes for plain
Python objects such as :class:`~edgewise.entity.Stateful` subclasses.
"""

from __future__ import annotations

import inspect
import logging
import threading
import time
import weakref
from abc import abstractmethod
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, ContextManager, Protocol, runtime_checkable

from edgewise.config import Config, load_config
from edgewise.errors import LockTimeoutError
from edgewise.validator import OperationNames

log = logging.getLogger(__name__)


@runtime_checkable
class HostAdapter(Protocol):
    """Everything the transition engine needs from the persistence layer."""

    @abstractmethod
    def read_raw_state(self, entity: Any) -> int | None:
        """Return the stored state code, or None if nothing is stored yet."""
        ...

    @abstractmethod
    def write_raw_state(self, entity: Any, code: int) -> None:
        """Durably store ``code`` as the entity's state."""
        ...

    @abstractmethod
    def mark_modified(self, entity: Any) -> None:
        """Record that the entity changed (touch bookkeeping)."""
        ...

    @abstractmethod
    def exclusive_lock(self, entity: Any) -> ContextManager[Any]:
        """Pessimistic lock scope; must release on every exit path."""
        ...

    @abstractmethod
    def invoke_callback(self, entity: Any, name: str) -> None:
        """Call the zero-argument operation ``name`` on the entity.

        A missing operation must raise, not pass silently.
        """
        ...

    @abstractmethod
    def operation_names(self, host_type: type) -> OperationNames:
        """Names already defined by ``host_type``, used for clash checks."""
        ...

    @abstractmethod
    def register_scope(self, host_type: type, state: str, code: int) -> None:
        """Register a query filter selecting entities stored with ``code``."""
        ...


class AttributeHostAdapter:
    """HostAdapter keeping the raw code on a plain instance attribute.

    Each entity gets its own ``threading.RLock``, held weakly so entities
    need to be hashable and weak-referenceable; ``config.lock_timeout``
    bounds how long a transition waits for it.
    """

    def __init__(self, config: Config | None = None) -> None:
        # None reads edgewise.yaml, falling back to defaults
        self.config = config if config is not None else load_config()
        self._guard = threading.Lock()
        self._scopes: dict[tuple[type, str], int] = {}
        self._locks: weakref.WeakKeyDictionary[Any, threading.RLock] = weakref.WeakKeyDictionary()

    def read_raw_state(self, entity: Any) -> int | None:
        return getattr(entity, self.config.state_attribute, None)

    def write_raw_state(self, entity: Any, code: int) -> None:
        setattr(entity, self.config.state_attribute, code)

    def mark_modified(self, entity: Any) -> None:
        setattr(entity, self.config.modified_attribute, time.time())

    def _lock_for(self, entity: Any) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(entity)
            if lock is None:
                lock = self._locks[entity] = threading.RLock()
            return lock

    @contextmanager
    def exclusive_lock(self, entity: Any) -> Iterator[None]:
        lock = self._lock_for(entity)
        timeout = self.config.lock_timeout
        if not lock.acquire(timeout=-1 if timeout is None else timeout):
            raise LockTimeoutError(
                f"Could not lock {type(entity).__name__} within {timeout}s"
            )
        try:
            yield
        finally:
            lock.release()

    def invoke_callback(self, entity: Any, name: str) -> None:
        getattr(entity, name)()

    def operation_names(self, host_type: type) -> OperationNames:
        type_level = set()
        instance_level = set()
        for name in dir(host_type):
            if name.startswith("__"):
                continue
            instance_level.add(name)
            if isinstance(inspect.getattr_static(host_type, name), (classmethod, staticmethod)):
                type_level.add(name)
        return OperationNames(frozenset(type_level), frozenset(instance_level))

    def register_scope(self, host_type: type, state: str, code: int) -> None:
        self._scopes[(host_type, state)] = code
        log.debug("Registered scope %s.%s (code=%d)", host_type.__name__, state, code)

    def scope(self, host_type: type, state: str, entities: Iterable[Any]) -> list[Any]:
        """Filter ``entities`` down to those stored in ``state``."""
        code = self._scopes[(host_type, state)]
        return [e for e in entities if self.read_raw_state(e) == code]
