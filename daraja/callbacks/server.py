"""Standalone async HTTP server for Daraja callbacks.

Uses aiohttp's AppRunner/TCPSite so it can run alongside other work in the
same event loop. Daraja only calls public HTTPS URLs, so in practice this
sits behind a reverse proxy or tunnel that terminates TLS.
"""

from __future__ import annotations

import logging

from aiohttp import web

from daraja.callbacks.receiver import CallbackDispatcher
from daraja.config import settings

logger = logging.getLogger(__name__)


async def _health(request: web.Request) -> web.Response:
    """GET /health: basic liveness check."""
    return web.json_response({"status": "ok"})


def create_server_app(dispatcher: CallbackDispatcher) -> web.Application:
    """Health check plus every other path routed through *dispatcher*."""
    app = web.Application()
    app.router.add_get("/health", _health)
    app.router.add_route("*", "/{tail:.*}", dispatcher.handle)
    return app


class CallbackServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(
        self,
        dispatcher: CallbackDispatcher,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.host = host or settings.callback_host
        self.port = port if port is not None else settings.callback_port
        self._runner: web.AppRunner | None = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        """Start listening for callbacks."""
        if self._runner is not None:
            return
        if not self.dispatcher.paths:
            logger.warning("No callback routes registered; server not started")
            return

        self._runner = web.AppRunner(create_server_app(self.dispatcher))
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(
            "Callback server listening on %s:%d (paths: %s)",
            self.host,
            self.port,
            self.dispatcher.paths,
        )

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Callback server stopped")
