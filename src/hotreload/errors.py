"""Exception types shared across hotreload."""

from __future__ import annotations


class HotReloadError(Exception):
    """Base class for hotreload errors."""


class ConfigError(HotReloadError):
    """Raised when configuration values are invalid."""


class ConnectionClosedError(HotReloadError):
    """Raised when writing to a stream client that is closed or stalled."""


class ClientLimitError(HotReloadError):
    """Raised when a new stream subscriber would exceed max_clients."""
