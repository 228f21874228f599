"""FastAPI application wiring for the hot reload dev server."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from hotreload.config.schema import Config, HotReloadConfig
from hotreload.core.notifier import NotificationService
from hotreload.logging import get_logger
from hotreload.watching.watcher import BuildWatcher
from hotreload.web.middleware import HotReloadMiddleware
from hotreload.web.static import create_static_files

log = get_logger("web")


def create_service(config: HotReloadConfig) -> NotificationService:
    """Build the NotificationService described by ``config``."""
    return NotificationService(
        keepalive_interval=config.keepalive_interval,
        max_clients=config.max_clients,
        max_pending=config.max_pending,
    )


def create_app(
    config: Config | None = None,
    service: NotificationService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Full configuration; defaults leave hot reload disabled.
        service: Notifier to use; built from the config when omitted and
            hot reload is enabled.
    """
    config = config or Config()
    hot = config.hot_reload
    if hot.enabled and service is None:
        service = create_service(hot)
    if not hot.enabled:
        log.info("Hot Reload is disabled")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        watcher: BuildWatcher | None = None
        if hot.enabled and hot.watch and service is not None:
            watcher = BuildWatcher(hot.watch, service, debounce=hot.debounce)
            watcher.start()
        app.state.watcher = watcher
        try:
            yield
        finally:
            if watcher is not None:
                await watcher.stop()
            if service is not None:
                await service.close()

    app = FastAPI(
        title="Hot Reload Dev Server",
        description="Notifies browsers when a new build is available",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.service = service
    app.state.watcher = None
    app.state.started_at = time.time()

    _register_routes(app)

    if hot.enabled:
        app.add_middleware(HotReloadMiddleware, service=service, config=hot)

    if config.static.directory:
        app.mount(
            "/",
            create_static_files(config.static.directory, config.static.control_file),
            name="static",
        )

    return app


def _register_routes(app: FastAPI) -> None:
    """Register the JSON status route."""

    @app.get("/api/status")
    async def api_status() -> dict[str, Any]:
        """Report hot reload health."""
        config: Config = app.state.config
        service: NotificationService | None = app.state.service
        watcher: BuildWatcher | None = app.state.watcher

        status: dict[str, Any] = {
            "status": "ok",
            "enabled": config.hot_reload.enabled,
            "mode": config.hot_reload.mode.value,
            "uptime": time.time() - app.state.started_at,
            "watching": watcher is not None and watcher.running,
        }
        if service is not None:
            status.update(
                uuid=service.state.current(),
                generation=service.state.generation,
                connections=service.registry.size(),
            )
        return status
