"""Usage endpoint: resolve and fetch on every request."""

from __future__ import annotations

from aiohttp import web

from llm_usage.logging import get_logger
from llm_usage.usage.fetch import fetch_all
from llm_usage.usage.resolver import resolve_providers

log = get_logger("llm_usage.api.routes.usage")


async def handle_usage(request: web.Request) -> web.Response:
    """GET /api/v1/usage?provider=&account=

    Credentials are re-read for each request so edits made with the setup
    commands show up without a restart.
    """
    provider_filter = request.query.get("provider", "")
    account_filter = request.query.get("account", "")

    try:
        instances = resolve_providers(
            provider_filter,
            account_filter,
            all_accounts=not account_filter,
            store=request.app["store"],
            resources=request.app["resources"],
            default_provider=request.app["default_provider"],
        )
    except OSError as e:
        log.exception("credentials_read_failed")
        return web.json_response({"error": f"Failed to read credentials: {e}"}, status=500)

    stats = await fetch_all(instances)

    log.debug(
        "usage_request_served",
        provider=provider_filter or "all",
        account=account_filter or None,
        rows=len(stats.providers),
    )
    return web.json_response(stats.to_dict(), headers={"Cache-Control": "no-cache"})
