"""Logging setup for the courtdesk entry points."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "COURTDESK_LOG_LEVEL"


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger with a terse CLI format.

    ``level`` wins over ``COURTDESK_LOG_LEVEL``; unknown level names fall back to INFO.
    Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=level if level is not None else _level_from_environment(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def _level_from_environment() -> int:
    name = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return logging.INFO
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO
