"""Logging configuration for the ``exptrack`` package.

Library modules only call ``logging.getLogger(__name__)``. The CLI calls
``configure_logging`` once at startup to attach a single handler to the
package logger; until then the package logger carries a ``NullHandler``
(see ``exptrack/__init__.py``).
"""

import logging
import os
import sys
from typing import IO

PKG_LOGGER_NAME = "exptrack"
LOG_LEVEL_ENV = "EXPTRACK_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured_handler: logging.Handler | None = None


def parse_level(level: int | str | None) -> int:
    """Resolve a level given as int, name or numeric string.

    None falls back to ``EXPTRACK_LOG_LEVEL``, then WARNING.
    """
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = logging.getLevelName(level)
        if isinstance(numeric, int):
            return numeric
        return logging.WARNING
    env_val = os.environ.get(LOG_LEVEL_ENV)
    if env_val:
        return parse_level(env_val)
    return logging.WARNING


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach one StreamHandler to the package logger.

    Calling it again replaces the handler, so the CLI callback can run once
    per invocation without stacking handlers.

    Args:
        level: Level as int or name; None uses EXPTRACK_LOG_LEVEL or WARNING.
        fmt: Format string, defaults to DEFAULT_FORMAT.
        stream: Output stream, defaults to stderr.

    Returns:
        The package logger.
    """
    global _configured_handler

    logger = logging.getLogger(PKG_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler) or handler is _configured_handler:
            logger.removeHandler(handler)

    resolved = parse_level(level)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Avoid double emission via the root logger
    logger.propagate = False

    _configured_handler = handler
    return logger
