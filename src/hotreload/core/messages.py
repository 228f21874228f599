"""Wire messages sent to browser clients."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

RELOAD_EVENT = "reload"
PING_EVENT = "ping"


@dataclass(frozen=True)
class BroadcastMessage:
    """Immutable snapshot of one event pushed to clients.

    Reload messages carry ``{"uuid": token}``; keep-alive pings carry
    ``{"ping": instance_id}``.
    """

    event: str
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the payload so a message can be shared between clients
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def __hash__(self) -> int:
        # MappingProxyType is unhashable; hash the frozen items instead
        return hash((self.event, tuple(sorted(self.data.items()))))

    @classmethod
    def reload(cls, token: str) -> BroadcastMessage:
        return cls(RELOAD_EVENT, {"uuid": token})

    @classmethod
    def ping(cls, instance_id: str) -> BroadcastMessage:
        return cls(PING_EVENT, {"ping": instance_id})

    def to_json(self) -> str:
        """Compact JSON body, e.g. ``{"uuid":"..."}``."""
        return json.dumps(dict(self.data), separators=(",", ":"))

    def to_sse(self) -> str:
        """Server-Sent Events frame for this message."""
        return f"event: {self.event}\ndata: {self.to_json()}\n\n"
