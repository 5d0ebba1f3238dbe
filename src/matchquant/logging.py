"""Logging helpers for matchquant."""

from __future__ import annotations

import logging
from typing import Iterable

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: int | str = logging.INFO,
    handlers: Iterable[logging.Handler] | None = None,
) -> None:
    """Configure root logging for command line sessions.

    Library code only emits through module loggers; applications embedding
    the simulator decide where the records go by calling this helper (or
    their own logging setup) once at start-up.
    """

    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=list(handlers) if handlers else None,
    )


__all__ = ["LOG_FORMAT", "configure_logging"]
