"""Logging utilities for generalqp.

All loggers live under the ``generalqp`` namespace and write to stderr with a
``[LEVEL] name: message`` layout. Solver progress tables are emitted at INFO,
so they stay silent until the level is lowered.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

_ROOT = "generalqp"
_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_DEFAULT_LEVEL = logging.WARNING

_loggers: dict[str, logging.Logger] = {}


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return int(level)


def _attach_handler(logger: logging.Logger, level: int, stream: TextIO, fmt: str) -> None:
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached ``generalqp`` logger for ``name``.

    Args:
        name: Usually ``__name__`` of the calling module. Names outside the
            ``generalqp`` namespace are nested under it.

    Example:
        >>> from generalqp.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("added constraint %d", 3)
    """
    if name is None:
        name = _ROOT
    logger_name = name if name == _ROOT or name.startswith(_ROOT + ".") else f"{_ROOT}.{name}"

    cached = _loggers.get(logger_name)
    if cached is not None:
        return cached

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        _attach_handler(logger, _DEFAULT_LEVEL, sys.stderr, _FORMAT)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every generalqp logger, including ones created later.

    Args:
        level: ``logging`` constant or its name (``"INFO"``, ``"DEBUG"``, ...).
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Replace the handlers of all generalqp loggers.

    Args:
        level: Logging level (default: WARNING).
        format_string: Record format; defaults to ``[LEVEL] name: message``.
        stream: Output stream (default: ``sys.stderr``).
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    stream = sys.stderr if stream is None else stream
    fmt = _FORMAT if format_string is None else format_string

    for logger in _loggers.values():
        logger.setLevel(level)
        _attach_handler(logger, level, stream, fmt)
    _DEFAULT_LEVEL = level


__all__ = ["get_logger", "set_log_level", "configure_logging"]
