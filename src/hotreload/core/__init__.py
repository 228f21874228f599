"""Core live-reload state: version token, client registry and notifier."""

from hotreload.core.messages import BroadcastMessage
from hotreload.core.notifier import NotificationService
from hotreload.core.registry import ClientConnection, ClientRegistry
from hotreload.core.version import VersionState

__all__ = [
    "BroadcastMessage",
    "ClientConnection",
    "ClientRegistry",
    "NotificationService",
    "VersionState",
]
