"""Configuration loading.

Handles:
- YAML file parsing
- Environment variable overrides
- Conversion from dict to the typed, validated Config dataclass
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from hotreload.config.schema import (
    Config,
    HotReloadConfig,
    LoggingConfig,
    ServerConfig,
    StaticConfig,
    TransportMode,
)
from hotreload.errors import ConfigError

_log = logging.getLogger("hotreload.config")

CONFIG_FILENAME = "hot-reload.yaml"

# Presence of this variable turns the notifier on; a non-empty value names
# the build marker file to watch.
ENV_TOGGLE = "HOT_RELOAD"
ENV_MODE = "HOT_RELOAD_MODE"
ENV_PATH = "HOT_RELOAD_PATH"
ENV_LOG = "HOT_RELOAD_LOG"

_KNOWN_KEYS = {"hot_reload", "static", "server", "logging"}

_TRUE_WORDS = ("true", "yes", "on", "1")
_FALSE_WORDS = ("false", "no", "off", "0", "")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Build a config dict from environment variables.

    Args:
        environ: Mapping to read instead of os.environ (used by tests).
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    hot: dict[str, Any] = {}

    if ENV_TOGGLE in env:
        hot["enabled"] = True
        target = env[ENV_TOGGLE].strip()
        if target:
            hot["watch"] = target
    if env.get(ENV_MODE):
        hot["mode"] = env[ENV_MODE].strip().lower()
    if env.get(ENV_PATH):
        hot["status_path"] = env[ENV_PATH].strip()

    if hot:
        overrides["hot_reload"] = hot
    if env.get(ENV_LOG):
        overrides["logging"] = {"file": env[ENV_LOG]}

    return overrides


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base.

    None values in override leave the base value alone; lists and scalars
    replace it.
    """
    result = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


def _number(section: str, data: dict[str, Any], key: str, default: float, kind: type = float) -> Any:
    value = data.get(key, default)
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{section}.{key} must be a number: {value!r}") from e


def _flag(section: str, data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ConfigError(f"{section}.{key} must be true or false: {value!r}")


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to a typed, validated Config.

    Raises:
        ConfigError: If a value has the wrong type or is out of range.
    """
    hot_data = _section(data, "hot_reload")
    mode_value = hot_data.get("mode", TransportMode.SSE.value)
    try:
        mode = TransportMode(str(mode_value).lower())
    except ValueError as e:
        raise ConfigError(f"hot_reload.mode must be 'sse' or 'poll': {mode_value!r}") from e

    defaults = HotReloadConfig()
    hot_reload = HotReloadConfig(
        enabled=_flag("hot_reload", hot_data, "enabled", False),
        watch=hot_data.get("watch") or None,
        mode=mode,
        status_path=hot_data.get("status_path", defaults.status_path),
        script_path=hot_data.get("script_path"),
        keepalive_interval=_number(
            "hot_reload", hot_data, "keepalive_interval", defaults.keepalive_interval
        ),
        debounce=_number("hot_reload", hot_data, "debounce", defaults.debounce),
        max_clients=_number("hot_reload", hot_data, "max_clients", defaults.max_clients, int),
        max_pending=_number("hot_reload", hot_data, "max_pending", defaults.max_pending, int),
    ).validate()

    static_data = _section(data, "static")
    static = StaticConfig(
        directory=static_data.get("directory"),
        control_file=static_data.get("control_file", StaticConfig().control_file),
    )

    server_data = _section(data, "server")
    server = ServerConfig(
        host=server_data.get("host", ServerConfig().host),
        port=_number("server", server_data, "port", ServerConfig().port, int),
    )

    log_data = _section(data, "logging")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        file=log_data.get("file"),
    )

    extra = {k: v for k, v in data.items() if k not in _KNOWN_KEYS}

    return Config(
        hot_reload=hot_reload,
        static=static,
        server=server,
        logging=logging_config,
        extra=extra,
    )


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Explicit overrides (command-line flags)
    2. Environment variables
    3. YAML file (``path`` or ./hot-reload.yaml)
    4. Built-in defaults

    Args:
        path: Config file path. Defaults to hot-reload.yaml in the cwd.
        environ: Environment mapping to read instead of os.environ.
        overrides: Highest-priority values, shaped like the YAML file.

    Returns:
        The validated Config.

    Raises:
        ConfigError: If any merged value is invalid.
    """
    config_path = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME
    if path is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    merged: dict[str, Any] = {}
    file_data = load_yaml_file(config_path)
    if file_data:
        _log.debug("Loaded config from %s", config_path)
        merged = deep_merge(merged, file_data)

    merged = deep_merge(merged, env_overrides(environ))
    if overrides:
        merged = deep_merge(merged, overrides)

    return dict_to_config(merged)
