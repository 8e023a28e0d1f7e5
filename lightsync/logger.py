"""
Logging for LightSync.

One "lightsync" logger for the whole app. Routine records (DEBUG, INFO)
go to stdout and problems (WARNING and up) go to stderr, so a service
manager can keep them apart. LOG_LEVEL sets the threshold.
"""

import logging
import sys
from typing import Optional, TextIO

from lightsync.config import LOG_LEVEL

LOGGER_NAME = "lightsync"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LevelFilter(logging.Filter):
    """Pass only records within [level_min, level_max]."""

    def __init__(self, level_min: int, level_max: int):
        super().__init__()
        self.level_min = level_min
        self.level_max = level_max

    def filter(self, record: logging.LogRecord) -> bool:
        return self.level_min <= record.levelno <= self.level_max


def _stream_handler(stream: TextIO, level_min: int, level_max: Optional[int] = None) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level_min)
    if level_max is not None:
        handler.addFilter(LevelFilter(level_min, level_max))
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(level: str = LOG_LEVEL, name: str = LOGGER_NAME) -> logging.Logger:
    """
    Build the application logger.

    Args:
        level: Threshold name, e.g. "DEBUG" (unknown names fall back to INFO)
        name: Logger name

    Returns:
        Configured logger; calling again replaces its handlers
    """
    logger = logging.getLogger(name)
    resolved = logging.getLevelName(level.upper())
    logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)

    # uvicorn configures the root logger; records would print twice
    logger.propagate = False
    logger.handlers.clear()

    logger.addHandler(_stream_handler(sys.stdout, logging.DEBUG, logging.INFO))
    logger.addHandler(_stream_handler(sys.stderr, logging.WARNING))

    return logger


logger = setup_logging()
