"""Health check endpoint."""

from aiohttp import web

from llm_usage import __version__


async def handle_health(request: web.Request) -> web.Response:
    """GET /api/v1/health"""
    return web.json_response({"status": "healthy", "version": __version__})
