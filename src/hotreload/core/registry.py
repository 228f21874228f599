"""Registry of live Server-Sent Events subscribers."""

from __future__ import annotations

import asyncio
import itertools
import threading
import time
from collections.abc import AsyncIterator, Callable

from hotreload.core.messages import BroadcastMessage
from hotreload.errors import ConnectionClosedError
from hotreload.logging import get_logger

log = get_logger("registry")

_ids = itertools.count(1)


class ClientConnection:
    """One streaming client.

    Messages are queued here by broadcasts and drained by the response
    generator that owns the connection. The queue is bounded: a client that
    stops reading is treated as gone once ``max_pending`` messages pile up.

    ``send`` and ``close`` must be called from the event loop thread.
    """

    def __init__(self, max_pending: int = 64) -> None:
        self.id = next(_ids)
        self.connected_at = time.time()
        self._queue: asyncio.Queue[BroadcastMessage | None] = asyncio.Queue(maxsize=max_pending)
        self._closed = False
        self._close_callbacks: list[Callable[[ClientConnection], object]] = []

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Messages queued but not yet written to the transport."""
        return self._queue.qsize()

    def send(self, message: BroadcastMessage) -> None:
        """Queue a message for delivery.

        Raises:
            ConnectionClosedError: If the connection is closed or its queue
                is full. A full queue also closes the connection.
        """
        if self._closed:
            raise ConnectionClosedError(f"client {self.id} is closed")
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self.close()
            raise ConnectionClosedError(f"client {self.id} stalled") from None

    def close(self) -> None:
        """Mark the connection closed and wake its reader.

        Undelivered messages are dropped. Closing twice is a no-op.
        """
        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)

        for callback in self._close_callbacks:
            try:
                callback(self)
            except Exception as e:
                log.error("Error in close callback for client %d: %s", self.id, e)

    def on_close(self, callback: Callable[[ClientConnection], object]) -> None:
        """Register a callback run once when the connection closes."""
        self._close_callbacks.append(callback)

    async def messages(self) -> AsyncIterator[BroadcastMessage]:
        """Yield queued messages until the connection is closed."""
        while True:
            message = await self._queue.get()
            if message is None:
                return
            yield message

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ClientConnection {self.id} {state}>"


class ClientRegistry:
    """Thread-safe set of open client connections.

    Broadcasts iterate over a snapshot, so connections may be added or
    removed while a broadcast is in flight.
    """

    def __init__(self) -> None:
        self._connections: set[ClientConnection] = set()
        self._lock = threading.Lock()

    def add(self, connection: ClientConnection) -> None:
        """Register a connection; it removes itself again when closed."""
        with self._lock:
            self._connections.add(connection)
        connection.on_close(self.remove)
        log.debug("Client %d connected (%d total)", connection.id, self.size())

    def remove(self, connection: ClientConnection) -> bool:
        """Unregister a connection. Returns False if it was not registered."""
        with self._lock:
            if connection not in self._connections:
                return False
            self._connections.discard(connection)
        log.debug("Client %d disconnected (%d total)", connection.id, self.size())
        return True

    def size(self) -> int:
        return len(self._connections)

    def connections(self) -> list[ClientConnection]:
        """Snapshot of the registered connections."""
        with self._lock:
            return list(self._connections)

    def broadcast(self, message: BroadcastMessage) -> int:
        """Send a message to every registered connection.

        A connection that is closed or fails the write is removed; the
        remaining connections still receive the message.

        Returns:
            Number of connections the message was delivered to.
        """
        delivered = 0
        dead_connections: list[ClientConnection] = []
        for connection in self.connections():
            try:
                connection.send(message)
                delivered += 1
            except Exception as e:
                log.debug("Dropping client %d: %s", connection.id, e)
                dead_connections.append(connection)

        if dead_connections:
            with self._lock:
                for connection in dead_connections:
                    self._connections.discard(connection)

        return delivered

    def close_all(self) -> int:
        """Close and drop every connection. Returns how many were closed."""
        with self._lock:
            connections = list(self._connections)
            self._connections.clear()

        for connection in connections:
            connection.close()
        if connections:
            log.info("Closed %d hot reload clients", len(connections))
        return len(connections)
