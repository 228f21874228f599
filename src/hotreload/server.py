"""Dev server lifecycle: run the hot reload app under uvicorn."""

from __future__ import annotations

import socket
from typing import TYPE_CHECKING

import uvicorn

from hotreload.logging import get_logger
from hotreload.web.app import create_app

if TYPE_CHECKING:
    from hotreload.config.schema import Config
    from hotreload.core.notifier import NotificationService

log = get_logger("server")

# Upper bound on waiting for open requests once shutdown has begun
SHUTDOWN_TIMEOUT = 5


class DevServer(uvicorn.Server):
    """uvicorn Server that ends hot reload streams when it shuts down.

    uvicorn waits for every open response before running the lifespan
    teardown, and an SSE response only ends when its connection is closed.
    Closing the stream clients first lets shutdown proceed, and browsers see
    a clean end of stream and start their reconnect loop.
    """

    def __init__(self, config: uvicorn.Config, service: NotificationService | None = None) -> None:
        super().__init__(config)
        self.service = service

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        if self.service is not None:
            closed = self.service.registry.close_all()
            log.debug("Ended %d hot reload stream(s) for shutdown", closed)
        await super().shutdown(sockets=sockets)


def build_server(config: Config) -> DevServer:
    """Create a DevServer for the configured app."""
    app = create_app(config)
    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",
        access_log=False,
        timeout_graceful_shutdown=SHUTDOWN_TIMEOUT,
    )
    return DevServer(uvicorn_config, service=app.state.service)


async def serve(config: Config) -> None:
    """Serve until interrupted."""
    server = build_server(config)
    log.info("Dev server on http://%s:%d", config.server.host, config.server.port)
    await server.serve()
