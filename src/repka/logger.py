"""Logging setup.

All modules log through ``logging.getLogger(__name__)``; this module only
decides the verbosity of the ``repka`` logger and how records are rendered.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "repka"
LOG_LEVEL_ENV = "REPKA_LOG_LEVEL"

LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}

# Above CRITICAL, nothing gets through
OFF = logging.CRITICAL + 10

_handler: RichHandler | None = None


def parse_verbosity(value: str | None) -> int:
    """Map a verbosity name to a logging level.

    Unknown or missing values fall back to ``info``; ``off`` and ``silent``
    disable logging.
    """
    if value is None:
        return logging.INFO
    value = value.strip().lower()
    if value in ("off", "silent"):
        return OFF
    return LEVELS.get(value, logging.INFO)


def configure_logging(verbosity: str | None = None, console: Console | None = None) -> int:
    """Configure the ``repka`` logger.

    Args:
        verbosity: Level name. Defaults to ``$REPKA_LOG_LEVEL`` or ``info``.
        console: Console to render to. Defaults to stderr.

    Returns:
        The effective logging level.
    """
    global _handler

    level = parse_verbosity(verbosity if verbosity is not None else os.environ.get(LOG_LEVEL_ENV))
    logger = logging.getLogger(ROOT_LOGGER)

    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    _handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(level)
    return level


def is_debug_enabled() -> bool:
    """Whether debug records of the ``repka`` logger are emitted."""
    return logging.getLogger(ROOT_LOGGER).isEnabledFor(logging.DEBUG)
