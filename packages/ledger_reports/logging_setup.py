"""Logging configuration for the ``ledger_reports`` package.

Entry points (the CLI, or a host application) call :func:`configure_logging`
once at startup. Library modules only ever do::

    logger = get_logger(__name__)

and never attach handlers themselves. Until an entry point configures
logging, the package root logger carries a ``NullHandler`` so library use
stays silent.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "ledger_reports"
_ENV_LEVEL = "LEDGER_REPORTS_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv(_ENV_LEVEL)
        if not level:
            return logging.INFO
    text = level.strip().upper()
    if text.isdigit():
        return int(text)
    numeric = logging.getLevelName(text)
    # getLevelName returns "Level X" strings for unknown names
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Attach the single package ``StreamHandler``; later calls only adjust the level.

    ``level`` accepts an ``int`` or a level name. When ``None`` it falls back
    to ``LEDGER_REPORTS_LOG_LEVEL`` and then to ``INFO``.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    numeric = _parse_level(level)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False

    _handler.setLevel(numeric)
    logger.setLevel(numeric)


def reset_logging() -> None:
    """Detach the package handler again (tests use this between runs)."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace.

    Accepts either a dotted module name (``__name__``) or a bare suffix such as
    ``"collector"``.
    """

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    if name != _PKG_LOGGER_NAME and not name.startswith(_PKG_LOGGER_NAME + "."):
        name = f"{_PKG_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging"]
