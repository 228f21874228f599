"""Tests for the configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from hotreload.config import (
    Config,
    HotReloadConfig,
    TransportMode,
    deep_merge,
    dict_to_config,
    env_overrides,
    load_config,
)
from hotreload.errors import ConfigError


class TestDeepMerge:
    """Test the deep merge used to layer config sources."""

    def test_nested_merge(self) -> None:
        """Nested dicts are merged key by key."""
        base = {"hot_reload": {"mode": "sse", "debounce": 0.3}}
        override = {"hot_reload": {"debounce": 0.1}}
        result = deep_merge(base, override)
        assert result == {"hot_reload": {"mode": "sse", "debounce": 0.1}}

    def test_none_does_not_override(self) -> None:
        """None values leave the base untouched."""
        assert deep_merge({"port": 8080}, {"port": None}) == {"port": 8080}

    def test_base_is_not_mutated(self) -> None:
        """Merging returns a new dict."""
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestEnvOverrides:
    """Test the HOT_RELOAD* environment variables."""

    def test_unset_means_nothing(self) -> None:
        """Without variables there are no overrides."""
        assert env_overrides({}) == {}

    def test_empty_toggle_enables_without_watch(self) -> None:
        """HOT_RELOAD set but empty enables a fixed-token notifier."""
        assert env_overrides({"HOT_RELOAD": ""}) == {"hot_reload": {"enabled": True}}

    def test_toggle_value_is_watch_target(self) -> None:
        """A non-empty HOT_RELOAD names the marker file."""
        overrides = env_overrides({"HOT_RELOAD": "dist/build-info.json"})
        assert overrides["hot_reload"] == {"enabled": True, "watch": "dist/build-info.json"}

    def test_mode_path_and_log(self) -> None:
        """Mode, status path and log file have their own variables."""
        overrides = env_overrides(
            {"HOT_RELOAD_MODE": "POLL", "HOT_RELOAD_PATH": "/__hot", "HOT_RELOAD_LOG": "/tmp/hr.log"}
        )
        assert overrides["hot_reload"] == {"mode": "poll", "status_path": "/__hot"}
        assert overrides["logging"] == {"file": "/tmp/hr.log"}


class TestDictToConfig:
    """Test conversion and validation."""

    def test_defaults(self) -> None:
        """An empty dict yields a disabled SSE config."""
        config = dict_to_config({})
        assert isinstance(config, Config)
        assert config.hot_reload.enabled is False
        assert config.hot_reload.mode is TransportMode.SSE
        assert config.hot_reload.status_path == "/hot-reload"
        assert config.hot_reload.resolved_script_path == "/hot-reload/script"
        assert config.hot_reload.keepalive_interval == 15.0
        assert config.hot_reload.debounce == 0.3
        assert config.server.port == 8080

    def test_full_section(self) -> None:
        """Every hot_reload key is carried over."""
        config = dict_to_config(
            {
                "hot_reload": {
                    "enabled": True,
                    "watch": "build/info.json",
                    "mode": "poll",
                    "status_path": "/hot",
                    "script_path": "/hot.js",
                    "keepalive_interval": "5",
                    "max_clients": 10,
                },
                "custom": {"x": 1},
            }
        )
        hot = config.hot_reload
        assert hot.enabled and hot.watch == "build/info.json"
        assert hot.mode is TransportMode.POLL
        assert hot.stream is False
        assert hot.resolved_script_path == "/hot.js"
        assert hot.keepalive_interval == 5.0
        assert hot.max_clients == 10
        assert config.extra == {"custom": {"x": 1}}

    @pytest.mark.parametrize(
        "section",
        [
            {"mode": "websocket"},
            {"status_path": "hot-reload"},
            {"keepalive_interval": 0},
            {"keepalive_interval": "soon"},
            {"debounce": -1},
            {"max_clients": -1},
            {"max_pending": 0},
            {"status_path": "/x", "script_path": "/x"},
        ],
    )
    def test_invalid_values(self, section: dict) -> None:
        """Out-of-range or malformed values raise ConfigError."""
        with pytest.raises(ConfigError):
            dict_to_config({"hot_reload": section})

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(True, True), (False, False), ("false", False), ("No", False), ("off", False),
         ("yes", True), ("TRUE", True), ("1", True)],
    )
    def test_enabled_accepts_bools_and_words(self, value: object, expected: bool) -> None:
        """Quoted YAML words are read as booleans, not as truthy strings."""
        assert dict_to_config({"hot_reload": {"enabled": value}}).hot_reload.enabled is expected

    @pytest.mark.parametrize("value", ["maybe", 2, [True]])
    def test_enabled_rejects_other_values(self, value: object) -> None:
        """Anything that is not a boolean is a ConfigError."""
        with pytest.raises(ConfigError):
            dict_to_config({"hot_reload": {"enabled": value}})

    def test_quoted_false_in_yaml_file(self, tmp_path: Path) -> None:
        """enabled: "false" in the file leaves hot reload off."""
        path = tmp_path / "hot-reload.yaml"
        path.write_text('hot_reload:\n  enabled: "false"\n')
        assert load_config(path, environ={}).hot_reload.enabled is False

    def test_section_must_be_mapping(self) -> None:
        """A scalar where a section belongs is rejected."""
        with pytest.raises(ConfigError):
            dict_to_config({"server": "localhost"})

    def test_validate_returns_self(self) -> None:
        """validate() is chainable."""
        config = HotReloadConfig()
        assert config.validate() is config


class TestLoadConfig:
    """Test layering of file, environment and overrides."""

    def test_reads_default_file_from_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """hot-reload.yaml in the cwd is picked up."""
        (tmp_path / "hot-reload.yaml").write_text("hot_reload:\n  enabled: true\n  mode: poll\n")
        monkeypatch.chdir(tmp_path)
        config = load_config(environ={})
        assert config.hot_reload.enabled
        assert config.hot_reload.mode is TransportMode.POLL

    def test_no_file_is_fine(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a file the defaults apply."""
        monkeypatch.chdir(tmp_path)
        assert load_config(environ={}).hot_reload.enabled is False

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """An explicit path that does not exist is an error."""
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.yaml", environ={})

    def test_invalid_yaml_is_ignored(self, tmp_path: Path) -> None:
        """Broken YAML falls back to defaults."""
        path = tmp_path / "hot-reload.yaml"
        path.write_text("hot_reload: [unclosed\n")
        assert load_config(path, environ={}).hot_reload.enabled is False

    def test_env_beats_file(self, tmp_path: Path) -> None:
        """Environment variables override the file."""
        path = tmp_path / "hot-reload.yaml"
        path.write_text("hot_reload:\n  mode: poll\n  watch: a.json\n")
        config = load_config(path, environ={"HOT_RELOAD": "b.json", "HOT_RELOAD_MODE": "sse"})
        assert config.hot_reload.enabled
        assert config.hot_reload.watch == "b.json"
        assert config.hot_reload.mode is TransportMode.SSE

    def test_overrides_beat_env(self, tmp_path: Path) -> None:
        """Explicit overrides take the highest priority."""
        path = tmp_path / "hot-reload.yaml"
        path.write_text("server:\n  port: 9000\n")
        config = load_config(
            path,
            environ={"HOT_RELOAD_MODE": "poll"},
            overrides={"hot_reload": {"mode": "sse"}, "server": {"port": 9001, "host": None}},
        )
        assert config.hot_reload.mode is TransportMode.SSE
        assert config.server.port == 9001
        assert config.server.host == "127.0.0.1"
