"""hotreload: tell browsers when a new build is available."""

__version__ = "0.1.0"

# Public API
from hotreload.config import Config, HotReloadConfig, TransportMode, load_config
from hotreload.core import (
    BroadcastMessage,
    ClientConnection,
    ClientRegistry,
    NotificationService,
    VersionState,
)
from hotreload.errors import ClientLimitError, ConfigError, ConnectionClosedError, HotReloadError
from hotreload.watching import BuildWatcher, WatchTarget
from hotreload.web import HotReloadMiddleware, create_app

__all__ = [
    # Config
    "Config",
    "HotReloadConfig",
    "TransportMode",
    "load_config",
    # Core
    "BroadcastMessage",
    "ClientConnection",
    "ClientRegistry",
    "NotificationService",
    "VersionState",
    # Watching
    "BuildWatcher",
    "WatchTarget",
    # HTTP
    "HotReloadMiddleware",
    "create_app",
    # Errors
    "HotReloadError",
    "ConfigError",
    "ConnectionClosedError",
    "ClientLimitError",
]
