"""Read-only HTTP API serving usage statistics.

Every usage request resolves credentials afresh and fans out to the
providers; nothing is held between requests.
"""

from __future__ import annotations

import asyncio

from aiohttp import web

from llm_usage.api.routes.health import handle_health
from llm_usage.api.routes.providers import handle_providers
from llm_usage.api.routes.usage import handle_usage
from llm_usage.config import Settings
from llm_usage.credentials.store import CredentialStore
from llm_usage.logging import get_logger
from llm_usage.providers.registry import ProviderResources

log = get_logger("llm_usage.api.server")


class UsageAPIServer:
    """aiohttp server exposing usage and configured providers."""

    def __init__(
        self,
        store: CredentialStore,
        resources: ProviderResources,
        *,
        host: str = "localhost",
        port: int = 8080,
        default_provider: str = "claude",
    ) -> None:
        self._store = store
        self._resources = resources
        self._host = host
        self._port = port
        self._default_provider = default_provider
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

        log.info("usage_api_initialized", host=host, port=port)

    @classmethod
    def from_settings(
        cls, settings: Settings, host: str | None = None, port: int | None = None
    ) -> UsageAPIServer:
        """Build a server from application settings."""
        return cls(
            CredentialStore(settings.config_dir),
            ProviderResources.from_settings(settings),
            host=host or settings.api_host,
            port=port or settings.api_port,
            default_provider=settings.default_provider,
        )

    def create_app(self) -> web.Application:
        """Create and configure the aiohttp application."""
        app = web.Application()

        # Shared state for handlers
        app["store"] = self._store
        app["resources"] = self._resources
        app["default_provider"] = self._default_provider

        app.router.add_get("/api/v1/health", handle_health)
        app.router.add_get("/api/v1/usage", handle_usage)
        app.router.add_get("/api/v1/providers", handle_providers)

        self._app = app
        return app

    async def start(self) -> None:
        """Start the server."""
        if self._app is None:
            self.create_app()

        if self._app is None:  # pragma: no cover
            raise RuntimeError("create_app() must be called first")

        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self._host, self._port)
        await site.start()

        log.info("usage_api_started", host=self._host, port=self._port)

    async def stop(self) -> None:
        """Stop the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            log.info("usage_api_stopped")


async def run_server(server: UsageAPIServer) -> None:
    """Run until cancelled (Ctrl-C), then shut down cleanly."""
    await server.start()

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await server.stop()
