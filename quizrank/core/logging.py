"""Logging setup shared by the application and its scripts."""

from __future__ import annotations

import logging
import sys

from .config import LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """Configure the package logger with a console handler.

    Calling it more than once leaves the existing handler in place.
    """

    logger = logging.getLogger("quizrank")
    logger.setLevel(getattr(logging, level, logging.INFO))

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    return logger


__all__ = ["setup_logging"]
