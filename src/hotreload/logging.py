"""Logging configuration for hotreload.

Uses Python's standard logging module with support for:
- File logging via config or HOT_RELOAD_LOG environment variable
- Stderr fallback when no log file is configured
- Compact format with timestamps and lowercase level names
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hotreload.config.schema import LoggingConfig

# Package logger; every module logs through a child of it
logger = logging.getLogger("hotreload")

_initialized = False

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# -v count -> level
_VERBOSITY_MAP = {
    0: logging.INFO,
    1: logging.DEBUG,
}


class _LowercaseLevelFormatter(logging.Formatter):
    """Formatter that emits lowercase level names."""

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(level: str | None, verbose: int = 0) -> int:
    """Map a level name or a -v count to a logging level.

    A non-zero verbose count wins over the configured level name.
    """
    if verbose:
        return _VERBOSITY_MAP.get(verbose, logging.DEBUG)
    if level:
        return _LEVEL_MAP.get(level.upper(), logging.INFO)
    return logging.INFO


def setup_logging(config: LoggingConfig | None = None, verbose: int = 0) -> None:
    """Initialize logging for the hotreload logger.

    Call this once at startup. Subsequent calls are no-ops.

    Args:
        config: Optional LoggingConfig with level and file settings.
        verbose: Count of -v flags from the command line.
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    log_level = resolve_level(config.level if config else None, verbose)
    logger.setLevel(log_level)

    # Format: HH:MM:SS level: message
    formatter = _LowercaseLevelFormatter(
        "%(asctime)s %(levelname)s: %(message)s", datefmt="%H:%M:%S"
    )

    log_path = config.file if config and config.file else os.environ.get("HOT_RELOAD_LOG")

    if log_path:
        log_path = os.path.expanduser(log_path)
        try:
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            print(f"[hotreload] Failed to open log file: {e}", file=sys.stderr)
            _add_stderr_handler(formatter, log_level)
    else:
        _add_stderr_handler(formatter, log_level)


def _add_stderr_handler(formatter: logging.Formatter, level: int = logging.DEBUG) -> None:
    """Add a stderr handler to the logger."""
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Optional name for a child logger (e.g., "watching", "web").
              If None, returns the root hotreload logger.

    Returns:
        A configured logger instance.
    """
    if name:
        return logger.getChild(name)
    return logger
