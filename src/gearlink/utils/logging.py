from __future__ import annotations

import logging
import os
from typing import Literal, get_args

import coloredlogs  # type: ignore[import]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

LOGLEVEL_ENV_VAR = "LOGLEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DEFAULT_DATE_FORMAT = "%H:%M:%S"

# Held at WARNING unless the whole app runs at DEBUG.
CHATTY_LOGGERS = ("gearlink.core.mock_backend",)


def resolve_level(level: str | None = None) -> LogLevel:
    resolved = (level or os.environ.get(LOGLEVEL_ENV_VAR) or "INFO").upper()
    if resolved not in get_args(LogLevel):
        raise ValueError(f"Unknown log level: {resolved}")
    return resolved  # type: ignore[return-value]


def setup_logging(level: str | None = None) -> LogLevel:
    """Install coloredlogs on the root logger and return the level in effect."""
    resolved = resolve_level(level)
    coloredlogs.install(level=resolved, fmt=DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    chatty_level = logging.DEBUG if resolved == "DEBUG" else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)
    return resolved
