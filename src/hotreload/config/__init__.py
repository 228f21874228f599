"""Configuration management for hotreload.

Combines, in rising priority, built-in defaults, an optional
``hot-reload.yaml`` file and ``HOT_RELOAD*`` environment variables.

Example usage:
    from hotreload.config import load_config

    config = load_config()
    if config.hot_reload.enabled:
        print(config.hot_reload.watch, config.hot_reload.mode)
"""

from hotreload.config.loader import (
    CONFIG_FILENAME,
    ENV_TOGGLE,
    deep_merge,
    dict_to_config,
    env_overrides,
    load_config,
)
from hotreload.config.schema import (
    Config,
    HotReloadConfig,
    LoggingConfig,
    ServerConfig,
    StaticConfig,
    TransportMode,
)

__all__ = [
    # Main API
    "Config",
    "load_config",
    "dict_to_config",
    "env_overrides",
    "deep_merge",
    "CONFIG_FILENAME",
    "ENV_TOGGLE",
    # Schema types
    "HotReloadConfig",
    "LoggingConfig",
    "ServerConfig",
    "StaticConfig",
    "TransportMode",
]
