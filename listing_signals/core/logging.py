"""
Listing Signals: Logging configuration.

The package only emits records through ``logging.getLogger(__name__)``
loggers under the ``listing_signals`` namespace; a ``NullHandler`` on that
namespace keeps it silent until the host opts in.

A host that wants the engine's output without wiring its own handlers calls
``configure_logging()`` once at startup::

    from listing_signals.core.logging import configure_logging
    configure_logging("DEBUG")      # analyzer breakdowns on stdout
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

from listing_signals import config

PACKAGE_LOGGER = "listing_signals"

# HTTP client loggers that are noisy at INFO during a batch fetch.
_QUIET_LOGGERS = ("httpx", "httpcore")


def resolve_level(level: Optional[str] = None) -> int:
    """Map a level name (default ``config.LOG_LEVEL``) to a logging constant.

    Unknown names fall back to INFO.
    """
    name = (level or config.LOG_LEVEL).strip().upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    level: Optional[str] = None,
    stream: Optional[IO[str]] = None,
    fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
) -> logging.Logger:
    """Attach one stream handler to the ``listing_signals`` logger.

    Calling again replaces the handler installed by the previous call and
    re-applies the level, so the package never logs a record twice.  The
    root logger and any handlers the host installed are left untouched.

    Returns the package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, "_listing_signals", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    handler._listing_signals = True
    logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    logger.propagate = False

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
