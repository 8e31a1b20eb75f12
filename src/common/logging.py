"""
Logging configuration helpers.
It gives the elasticity engine and the dashboard one log format and one level source (LOG_LEVEL).
HTTP transport chatter is held at WARNING so per-month elasticity requests stay readable.
"""

from __future__ import annotations

import logging

from src.common.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
QUIET_LOGGERS = ("urllib3", "watchdog")

_LOGGING_CONFIGURED = False


def resolve_level(level_name: str | None) -> int:
    if not level_name:
        return logging.INFO
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: str | None = None) -> logging.Logger:
    """Configure process-wide logging once and return the engine's root logger."""

    global _LOGGING_CONFIGURED
    engine_logger = logging.getLogger("elasticity")
    if _LOGGING_CONFIGURED:
        return engine_logger

    level = resolve_level(level_name or get_settings().LOG_LEVEL)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    engine_logger.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    _LOGGING_CONFIGURED = True
    return engine_logger
