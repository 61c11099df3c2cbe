"""YAML config loader."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

_DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "edgewise.yaml"


@dataclass
class Config:
    state_attribute: str = "_state"
    modified_attribute: str = "updated_at"
    lock_timeout: float | None = None  # seconds; None waits forever


def load_config(path: str | Path | None = None) -> Config:
    """Load config from YAML, falling back to defaults."""
    if path is None:
        path = _DEFAULT_CONFIG
    path = Path(path)
    if not path.exists():
        return Config()
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return Config(**{k: v for k, v in raw.items() if k in Config.__dataclass_fields__})
