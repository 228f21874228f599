"""Current build version token."""

from __future__ import annotations

import threading
import time
import uuid


def new_token() -> str:
    """Generate a fresh opaque version token."""
    return str(uuid.uuid4())


class VersionState:
    """Holds the token identifying the current build.

    One writer (the watcher) replaces the token; any number of request
    handlers read it. Reads are a single attribute load and never block.
    """

    def __init__(self, token: str | None = None) -> None:
        self._token = token or new_token()
        self._generation = 0
        self._updated_at = time.time()
        self._lock = threading.Lock()

    def current(self) -> str:
        """Return the latest token."""
        return self._token

    def regenerate(self) -> str:
        """Replace the token with a fresh one and return it."""
        with self._lock:
            token = new_token()
            while token == self._token:
                token = new_token()
            self._token = token
            self._generation += 1
            self._updated_at = time.time()
            return token

    @property
    def generation(self) -> int:
        """Number of regenerations since startup."""
        return self._generation

    @property
    def updated_at(self) -> float:
        """Unix time of the last token change (or of construction)."""
        return self._updated_at
