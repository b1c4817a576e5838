"""Logging helper shared by the engine modules."""

from __future__ import annotations

import logging

from rulekit.core.config import get_settings

_LOGGER_NAMES: set[str] = set()


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Return a logger with a single stream handler and the configured level."""

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel((level or get_settings().log_level).upper())
    _LOGGER_NAMES.add(name)
    return logger


def set_log_level(level: str) -> None:
    """Apply ``level`` to every logger handed out by ``get_logger``."""
    for name in _LOGGER_NAMES:
        logging.getLogger(name).setLevel(level.upper())
