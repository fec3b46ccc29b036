"""Logging configuration."""

import logging
import os
from typing import Dict

LOG_LEVEL_ENV = "WAVY_LOG_LEVEL"

_loggers: Dict[str, logging.Logger] = {}


def _configured_level() -> int:
    """Level from WAVY_LOG_LEVEL (name or number), WARNING when unset or invalid."""
    value = os.environ.get(LOG_LEVEL_ENV, "").strip()
    if not value:
        return logging.WARNING
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.WARNING


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger for the given name."""
    if name not in _loggers:
        logger = logging.getLogger(name)
        logger.setLevel(_configured_level())
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
                )
            )
            logger.addHandler(handler)
        _loggers[name] = logger
    return _loggers[name]
