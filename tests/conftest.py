"""Root pytest configuration for all tests."""

from __future__ import annotations

import pytest

from hotreload.config.schema import HotReloadConfig, TransportMode
from hotreload.core.notifier import NotificationService


@pytest.fixture
def service() -> NotificationService:
    """A fresh NotificationService with a long keep-alive interval."""
    return NotificationService(keepalive_interval=60.0)


@pytest.fixture
def sse_config() -> HotReloadConfig:
    """Enabled stream-mode config without a watch target."""
    return HotReloadConfig(enabled=True, mode=TransportMode.SSE)


@pytest.fixture
def poll_config() -> HotReloadConfig:
    """Enabled poll-mode config without a watch target."""
    return HotReloadConfig(enabled=True, mode=TransportMode.POLL)
