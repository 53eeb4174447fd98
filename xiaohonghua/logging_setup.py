"""Centralized logging configuration for the ``xiaohonghua`` package.

``configure_logging(...)`` attaches a single ``StreamHandler`` to the package
root logger and is called once by the Streamlit entrypoint. Library modules
only call ``get_logger(__name__)`` and never attach handlers themselves.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "xiaohonghua"
_CONFIGURED = False


def _level_from_text(text: str) -> int | None:
    text = text.strip().upper()
    if text.isdigit():
        return int(text)
    numeric = getattr(logging, text, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        parsed = _level_from_text(level)
        if parsed is not None:
            return parsed
    # unrecognised values fall through to the env var, then INFO
    parsed = _level_from_text(os.getenv("XIAOHONGHUA_LOG_LEVEL", ""))
    return parsed if parsed is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger exactly once.

    ``level`` falls back to ``XIAOHONGHUA_LOG_LEVEL`` and then ``INFO``.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(_parse_level(level))
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s"))

    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    # Streamlit configures the root logger too; avoid double output
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, keeping the package silent until configure_logging() runs."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
