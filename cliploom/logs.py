"""Logging setup for the ``cliploom`` package.

Modules log through ``logging.getLogger(__name__)``; nothing is printed unless
an application calls :func:`configure_logging` (or configures the root logger
itself).
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Union[int, str, None] = None) -> logging.Logger:
    """Attach a single stream handler to the package logger and set its level.

    ``level`` defaults to ``EditorSettings.log_level``. Calling this again only
    updates the level; it never stacks handlers.
    """
    global _handler
    logger = logging.getLogger("cliploom")
    if level is None:
        level = settings().log_level
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
    return logger


__all__ = ["configure_logging", "LOG_FORMAT"]
