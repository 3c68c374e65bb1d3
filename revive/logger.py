"""Logging setup for revive."""

import logging
import sys
from contextlib import contextmanager

from revive.log import logger

_HANDLER_NAME = "revive-console"


class LevelFormatter(logging.Formatter):
    """Prefix warnings and errors with their level name, leave the rest bare."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname}: {message}"
        return message


def setup(level: int = logging.INFO):
    """Attach a stderr handler to the package logger.

    Safe to call more than once; the handler is installed only the first time.
    """
    if any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(LevelFormatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = True


@contextmanager
def set_loggers_level(level: int):
    """Temporarily change the package logger level."""
    previous = logger.level
    logger.setLevel(level)
    try:
        yield
    finally:
        logger.setLevel(previous)
