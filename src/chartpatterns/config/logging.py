"""Logging helpers for the chartpatterns namespace."""

import logging
import sys
from typing import Optional, TextIO

from .settings import get_settings

ROOT_LOGGER = "chartpatterns"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
HANDLER_NAME = "chartpatterns.console"


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a console handler to the ``chartpatterns`` logger.

    The root logger is left alone so host applications keep their own setup.
    Calling again replaces the handler installed by the previous call.

    Args:
        level: Log level name; defaults to ``Settings.LOG_LEVEL``
        stream: Output stream; defaults to stdout
    """
    log_level = (level or get_settings().LOG_LEVEL).upper()

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the chartpatterns namespace."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
