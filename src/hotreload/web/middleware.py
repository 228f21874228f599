"""ASGI middleware serving the hot reload endpoints.

Only GET requests for the status and script paths are answered here; every
other request is handed to the wrapped application untouched.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

from starlette.requests import ClientDisconnect
from starlette.responses import PlainTextResponse, Response, StreamingResponse

from hotreload.errors import ClientLimitError
from hotreload.logging import get_logger
from hotreload.web.scripts import render_script

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

    from hotreload.config.schema import HotReloadConfig
    from hotreload.core.notifier import NotificationService
    from hotreload.core.registry import ClientConnection

log = get_logger("web")

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Access-Control-Allow-Origin": "*",
}


class HotReloadMiddleware:
    """Routes the status and script endpoints to the NotificationService.

    When ``config.enabled`` is false the middleware is a pure pass-through.
    """

    def __init__(
        self,
        app: ASGIApp,
        service: NotificationService | None,
        config: HotReloadConfig,
    ) -> None:
        if config.enabled and service is None:
            raise ValueError("an enabled HotReloadMiddleware needs a NotificationService")
        self.app = app
        self.service = service
        self.config = config
        self.status_path = config.status_path
        self.script_path = config.resolved_script_path
        self._script = render_script(self.status_path, config.stream)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or not self.config.enabled
            or scope["method"] != "GET"
            or scope["path"] not in (self.status_path, self.script_path)
        ):
            await self.app(scope, receive, send)
            return

        if scope["path"] == self.script_path:
            response = Response(self._script, media_type="application/javascript")
            await response(scope, receive, send)
        elif self.config.stream:
            await self._stream(scope, receive, send)
        else:
            await self._poll_response()(scope, receive, send)

    def _poll_response(self) -> Response:
        assert self.service is not None
        payload = self.service.current_payload()
        return Response(
            payload.to_json(),
            media_type="application/json",
            headers={"Cache-Control": "no-cache"},
        )

    async def _stream(self, scope: Scope, receive: Receive, send: Send) -> None:
        assert self.service is not None
        try:
            connection = self.service.subscribe()
        except ClientLimitError as e:
            log.warning("Rejecting hot reload client: %s", e)
            await PlainTextResponse(str(e), status_code=503)(scope, receive, send)
            return

        response = StreamingResponse(_sse_events(connection), headers=SSE_HEADERS)
        try:
            await response(scope, receive, send)
        except (ClientDisconnect, OSError) as e:
            log.debug("Hot reload client %d went away: %s", connection.id, e)
        finally:
            # Runs on peer disconnect, write errors and server shutdown alike
            self.service.unsubscribe(connection)


async def _sse_events(connection: ClientConnection) -> AsyncIterator[str]:
    async for message in connection.messages():
        yield message.to_sse()
