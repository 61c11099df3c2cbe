"""Load machine definitions from YAML.

YAML cannot hold callables, so the two transition hooks are written as
import paths::

    state:
      states: {placed: 1, paid: 2}
      events: [settle]
      edges:
        - {from: placed, to: paid, action: pay, callbacks: {in: false, post: false}, on_events: [settle]}
      on_successful_transition: edgewise.hooks:log_transition
      on_failed_transition: edgewise.hooks:log_failed_transition
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

import yaml

from edgewise.model import StateMachineModel
from edgewise.validator import OperationNames, validate

_HOOK_KEYS = ("on_successful_transition", "on_failed_transition")


def resolve_import_path(path: str) -> Any:
    """Import ``"package.module:attribute"`` and return the attribute."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ImportError(f"Expected 'module:attribute', got {path!r}")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ImportError(f"Module {module_name!r} has no attribute {attr!r}") from None


def resolve_hooks(raw: Any) -> Any:
    """Replace string hook references in a raw definition with the callables.

    Anything that is not a well-formed definition is returned untouched so
    the validator reports it.
    """
    if not isinstance(raw, dict) or len(raw) != 1:
        return raw
    ((field, machine),) = raw.items()
    if not isinstance(machine, dict):
        return raw
    machine = dict(machine)
    for key in _HOOK_KEYS:
        if isinstance(machine.get(key), str):
            machine[key] = resolve_import_path(machine[key])
    return {field: machine}


def load_definition(path: str | Path) -> Any:
    """Read a YAML definition with hooks resolved, ready for ``declare``."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Machine definition not found: {path}")
    with open(path) as f:
        return resolve_hooks(yaml.safe_load(f))


def load_machine(
    path: str | Path,
    type_name: str = "Entity",
    operations: OperationNames | None = None,
) -> StateMachineModel:
    """Load and validate a machine definition YAML file."""
    return validate(load_definition(path), type_name, operations)


def load_machine_str(
    text: str,
    type_name: str = "Entity",
    operations: OperationNames | None = None,
) -> StateMachineModel:
    """Parse and validate a machine definition from a YAML string."""
    return validate(resolve_hooks(yaml.safe_load(text)), type_name, operations)
