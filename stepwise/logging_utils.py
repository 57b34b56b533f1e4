"""
Logging helpers for stepwise.

Only the ``stepwise`` logger hierarchy is configured; the root logger and
any host application's handlers are left alone.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER = "stepwise"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "stepwise-cli"


def level_for_verbosity(verbosity: int) -> int:
    """
    verbosity == 0 -> WARNING
    verbosity == 1 -> INFO
    verbosity >= 2 -> DEBUG
    """

    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def configure_logging(verbosity: int, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a stderr handler to the ``stepwise`` logger at the level
    matching ``verbosity``.

    Calling this again (``main`` may run several times in one process)
    replaces the handler instead of stacking another one.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    level = level_for_verbosity(verbosity)

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
