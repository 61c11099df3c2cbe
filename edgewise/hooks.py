"""Ready-made transition hooks for definitions loaded from YAML."""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)


def log_transition(from_: str | None, to: str | None) -> None:
    log.info("State changed: %s -> %s", from_, to)


def log_failed_transition(from_: str | None, to: str | None) -> None:
    log.warning("State unchanged after refused transition: %s", from_)


def ignore(from_: str | None, to: str | None) -> None:
    pass
