# qbell/logging_config.py
from __future__ import annotations

import logging

from qbell.settings import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_LEVEL = "WARNING"


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """
    Configure root logging once and return the package logger.

    `level` overrides settings.LOG_LEVEL for this process. An unknown level
    name falls back to WARNING and says so.
    """
    chosen = level if level is not None else get_settings().LOG_LEVEL
    unknown = None
    if isinstance(chosen, str):
        chosen = chosen.strip().upper()
        if chosen not in logging.getLevelNamesMapping():
            unknown, chosen = chosen, DEFAULT_LEVEL
    logging.basicConfig(level=chosen, format=LOG_FORMAT)
    logger = logging.getLogger("qbell")
    logger.setLevel(chosen)
    if unknown is not None:
        logger.warning("Unknown log level %r, using %s", unknown, DEFAULT_LEVEL)
    return logger
