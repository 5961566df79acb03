"""Configured providers endpoint."""

from __future__ import annotations

from aiohttp import web

from llm_usage.providers.registry import display_name
from llm_usage.setup.accounts import list_configured_accounts


async def handle_providers(request: web.Request) -> web.Response:
    """GET /api/v1/providers

    Reads the credential store only; no vendor API is called.
    """
    configured = list_configured_accounts(
        request.app["store"], resources=request.app["resources"]
    )
    return web.json_response(
        [
            {"id": pid, "name": display_name(pid), "accounts": accounts}
            for pid, accounts in configured.items()
        ]
    )
