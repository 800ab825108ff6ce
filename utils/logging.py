"""
Centralized logging setup for the comparison engine.

Engine modules only log through ``logger``. Applications embedding the
engine call ``configure_logging()`` once at startup; without it the
``structdiff`` records go wherever the host's own logging sends them.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, Union

from config.settings import get_settings


_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
)


def configure_logging(
    level: Union[int, str, None] = None,
    logfile: Optional[str] = None,
) -> None:
    """
    Configure root logger with console (and optional file) handlers.

    ``level`` and ``logfile`` fall back to the ``LOG_LEVEL`` / ``LOG_FILE``
    settings. Level names such as ``"debug"`` are accepted.
    """
    settings = get_settings()
    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name!r}")
    logfile = logfile or settings.log_file

    handlers = [logging.StreamHandler(sys.stdout)]
    if logfile:
        handlers.append(logging.FileHandler(logfile))

    logging.basicConfig(level=level, format=_LOG_FORMAT, handlers=handlers)


logger = logging.getLogger("structdiff")
