"""Logging setup for the driver process."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_logging(level: str | int = "INFO") -> None:
    """Configure root logging once per process.

    Later calls only adjust the level so tests and embedding applications
    can reconfigure verbosity without stacking handlers.
    """
    global _configured
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if _configured:
        logging.getLogger().setLevel(level)
        return

    logging.basicConfig(level=level, format=LOG_FORMAT)
    _configured = True
