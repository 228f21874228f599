"""Notification service: version state plus fan-out to stream clients."""

from __future__ import annotations

import asyncio
import contextlib
import threading
import uuid

from hotreload.config.schema import DEFAULT_KEEPALIVE_INTERVAL, DEFAULT_MAX_PENDING
from hotreload.core.messages import BroadcastMessage
from hotreload.core.registry import ClientConnection, ClientRegistry
from hotreload.core.version import VersionState
from hotreload.errors import ClientLimitError
from hotreload.logging import get_logger

log = get_logger("notifier")


class NotificationService:
    """Announces new builds to connected browsers.

    A single instance is created at startup and handed to the HTTP layer and
    the watcher. Poll clients read ``current_payload()``; stream clients
    ``subscribe()`` and receive every later reload plus periodic pings.

    Example:
        service = NotificationService()
        connection = service.subscribe()
        service.regenerate()  # connection now holds two reload messages
    """

    def __init__(
        self,
        state: VersionState | None = None,
        registry: ClientRegistry | None = None,
        keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL,
        max_clients: int = 0,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        """Initialize the service.

        Args:
            state: Version token holder; a fresh one is created if omitted.
            registry: Stream client registry; a fresh one is created if omitted.
            keepalive_interval: Seconds between ping broadcasts.
            max_clients: Cap on concurrent stream subscribers (0 = unlimited).
            max_pending: Queue bound per stream subscriber.
        """
        self.state = state or VersionState()
        self.registry = registry or ClientRegistry()
        self.instance_id = uuid.uuid4().hex[:12]
        self.keepalive_interval = keepalive_interval
        self.max_clients = max_clients
        self.max_pending = max_pending

        # Serializes "read token + touch registry" so a subscriber can never
        # miss a reload that races with its registration.
        self._lock = threading.Lock()

        self._keepalive_lock = threading.Lock()
        self._keepalive_started = False
        self._keepalive_task: asyncio.Task[None] | None = None

    def current_payload(self) -> BroadcastMessage:
        """Reload message carrying the current token."""
        return BroadcastMessage.reload(self.state.current())

    def broadcast_reload(self) -> int:
        """Push the current token to every stream client.

        Returns:
            Number of clients the message was delivered to.
        """
        with self._lock:
            message = self.current_payload()
            delivered = self.registry.broadcast(message)
        log.info("Reload %s sent to %d client(s)", message.data["uuid"], delivered)
        return delivered

    def regenerate(self) -> str:
        """Mark a new build: replace the token and broadcast it."""
        token = self.state.regenerate()
        log.debug("Build changed, new token %s", token)
        self.broadcast_reload()
        return token

    def subscribe(self) -> ClientConnection:
        """Register a new stream client.

        The connection is queued the current reload message before it becomes
        visible to broadcasts, so its first message is always the current
        token. Must be called from the event loop thread.

        Raises:
            ClientLimitError: If max_clients subscribers are already connected.
        """
        if self.max_clients and self.registry.size() >= self.max_clients:
            raise ClientLimitError(f"hot reload client limit ({self.max_clients}) reached")

        self.start_keepalive()

        connection = ClientConnection(max_pending=self.max_pending)
        with self._lock:
            connection.send(self.current_payload())
            self.registry.add(connection)
        return connection

    def unsubscribe(self, connection: ClientConnection) -> None:
        """Drop a stream client; safe to call more than once."""
        self.registry.remove(connection)
        connection.close()

    def ping(self) -> int:
        """Broadcast one keep-alive ping."""
        return self.registry.broadcast(BroadcastMessage.ping(self.instance_id))

    def start_keepalive(self, interval: float | None = None) -> bool:
        """Arm the recurring ping broadcast.

        Only the first call arms the timer; later calls are no-ops.

        Args:
            interval: Seconds between pings; defaults to keepalive_interval.

        Returns:
            True if this call started the timer.
        """
        with self._keepalive_lock:
            if self._keepalive_started:
                return False
            self._keepalive_started = True

        if interval is not None:
            self.keepalive_interval = interval
        self._keepalive_task = asyncio.get_running_loop().create_task(self._keepalive_loop())
        log.debug("Keep-alive armed (interval=%.1fs)", self.keepalive_interval)
        return True

    @property
    def keepalive_running(self) -> bool:
        return self._keepalive_task is not None and not self._keepalive_task.done()

    async def _keepalive_loop(self) -> None:
        while True:
            await asyncio.sleep(self.keepalive_interval)
            try:
                self.ping()
            except Exception as e:
                log.error("Keep-alive broadcast failed: %s", e)

    async def close(self) -> None:
        """Stop the keep-alive timer and disconnect every stream client."""
        task = self._keepalive_task
        self._keepalive_task = None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self.registry.close_all()
