"""
Logging utilities for umlstudio.

Provides a centralized logging configuration for the entire package.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

# Package root logger
_root_logger = logging.getLogger("umlstudio")

# Children inherit this level, so it silences the whole package
_DISABLED_LEVEL = logging.CRITICAL + 1
_level_before_disable: int | None = None


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
    stream: TextIO | None = None,
    file: str | None = None,
) -> None:
    """
    Configure logging for umlstudio.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL) or int
        format: Custom log format string
        stream: Output stream (defaults to stderr)
        file: Optional file path to write logs

    Example:
        from umlstudio.logging import setup_logging

        setup_logging("DEBUG")
        setup_logging("INFO", file="umlstudio.log")
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    _root_logger.setLevel(level)
    _root_logger.handlers.clear()

    if format is None:
        format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    formatter = logging.Formatter(format)

    stream_handler = logging.StreamHandler(stream or sys.stderr)
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(level)
    _root_logger.addHandler(stream_handler)

    if file:
        file_handler = logging.FileHandler(file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        _root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger for a submodule.

    Args:
        name: Submodule name (e.g., "encoder", "studio")

    Returns:
        Logger instance
    """
    if name.startswith("umlstudio."):
        return logging.getLogger(name)
    return logging.getLogger(f"umlstudio.{name}")


def set_level(level: str | int) -> None:
    """Set the log level for umlstudio."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    _root_logger.setLevel(level)


def disable() -> None:
    """Disable all logging for umlstudio, including submodule loggers."""
    global _level_before_disable
    if _level_before_disable is None:
        _level_before_disable = _root_logger.level
        _root_logger.setLevel(_DISABLED_LEVEL)


def enable() -> None:
    """Re-enable logging for umlstudio."""
    global _level_before_disable
    if _level_before_disable is not None:
        _root_logger.setLevel(_level_before_disable)
        _level_before_disable = None
