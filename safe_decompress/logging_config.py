"""Central logging configuration utilities for safe_decompress.

The library only emits records; applications (or the bundled CLI) decide how
they are rendered by calling `configure_logging`.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .constants import LOG_LEVEL_ENV

PACKAGE_LOGGER = "safe_decompress"

# Silent unless the application (or the CLI) configures logging
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

_LEVEL_MAP = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


def resolve_level(level: str | int | None) -> int:
    """Translate a level name (or None for the environment default) to an int."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")

    if isinstance(level, str):
        return _LEVEL_MAP.get(level.upper(), logging.INFO)
    return level


def configure_logging(level: str | int | None = None, *, force: bool = False) -> None:
    """Configure root logger.

    Order of precedence for level:
    1. Explicit `level` argument if given
    2. Environment variable `SAFE_DECOMPRESS_LOG_LEVEL`
    3. Fallback to `INFO`
    """
    logging.basicConfig(
        level=resolve_level(level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a project logger. Handlers are left to the application."""
    return logging.getLogger(name or PACKAGE_LOGGER)


__all__ = ["PACKAGE_LOGGER", "configure_logging", "get_logger", "resolve_level"]
