"""Configuration schema dataclasses for hotreload.

Every field has a default so partial YAML files and environment overrides
merge cleanly on top of the built-in values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hotreload.errors import ConfigError

DEFAULT_STATUS_PATH = "/hot-reload"
DEFAULT_KEEPALIVE_INTERVAL = 15.0
DEFAULT_DEBOUNCE = 0.3
DEFAULT_MAX_PENDING = 64


class TransportMode(str, Enum):
    """How browser clients learn about new builds."""

    SSE = "sse"  # long-lived EventSource stream
    POLL = "poll"  # XHR polling, one request per check


@dataclass
class HotReloadConfig:
    """Live-reload notifier configuration.

    Example hot-reload.yaml:
        hot_reload:
          enabled: true
          watch: dist/build-info.json
          mode: sse
          keepalive_interval: 15
          debounce: 0.3
    """

    enabled: bool = False  # Master switch; when off every request passes through
    watch: str | None = None  # Build marker file; None means a fixed token
    mode: TransportMode = TransportMode.SSE
    status_path: str = DEFAULT_STATUS_PATH
    script_path: str | None = None  # Default: <status_path>/script
    keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL  # Seconds between pings
    debounce: float = DEFAULT_DEBOUNCE  # Quiet period before a change is announced
    max_clients: int = 0  # 0 = unlimited stream subscribers
    max_pending: int = DEFAULT_MAX_PENDING  # Queued messages before a client is dropped

    @property
    def stream(self) -> bool:
        """True when clients are served over Server-Sent Events."""
        return self.mode is TransportMode.SSE

    @property
    def resolved_script_path(self) -> str:
        """The script endpoint path."""
        if self.script_path:
            return self.script_path
        return self.status_path.rstrip("/") + "/script"

    def validate(self) -> HotReloadConfig:
        """Check value ranges, raising ConfigError on the first problem."""
        for name in ("status_path", "script_path"):
            value = getattr(self, name)
            if value is not None and not value.startswith("/"):
                raise ConfigError(f"hot_reload.{name} must start with '/': {value!r}")
        if self.resolved_script_path == self.status_path:
            raise ConfigError("hot_reload.script_path must differ from status_path")
        if self.keepalive_interval <= 0:
            raise ConfigError("hot_reload.keepalive_interval must be positive")
        if self.debounce < 0:
            raise ConfigError("hot_reload.debounce must not be negative")
        if self.max_clients < 0:
            raise ConfigError("hot_reload.max_clients must not be negative")
        if self.max_pending < 1:
            raise ConfigError("hot_reload.max_pending must be at least 1")
        return self


@dataclass
class StaticConfig:
    """Static file serving for the bundled dev server."""

    directory: str | None = None  # Directory to serve at "/"; None disables
    control_file: str = ".hot-reload"  # Disables HTTP caching when present in cwd


@dataclass
class ServerConfig:
    """Dev server bind address."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    file: str | None = None  # Log file path


@dataclass
class Config:
    """Root configuration object."""

    hot_reload: HotReloadConfig = field(default_factory=HotReloadConfig)
    static: StaticConfig = field(default_factory=StaticConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)  # Unknown top-level keys
