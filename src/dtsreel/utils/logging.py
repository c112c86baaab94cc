"""Logging utilities built on top of :mod:`loguru`."""
from __future__ import annotations

import logging
import sys
from typing import Optional

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def configure_logging(level: str = "INFO") -> None:
    """Route loguru to stderr and bridge the standard logging module into it."""

    level = level.upper()
    logger.remove()
    logger.add(lambda msg: print(msg, end="", file=sys.stderr), level=level, format=LOG_FORMAT)

    class LoguruHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                level_name: object = logger.level(record.levelname).name
            except ValueError:
                level_name = record.levelno
            logger.opt(depth=6, exception=record.exc_info).log(level_name, record.getMessage())

    # TRACE and SUCCESS only exist in loguru; stdlib logging needs the number.
    logging.basicConfig(handlers=[LoguruHandler()], level=logger.level(level).no, force=True)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a standard-library logger tied to loguru."""

    return logging.getLogger(name or __name__)
