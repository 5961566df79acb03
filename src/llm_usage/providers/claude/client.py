"""Async client for the Anthropic OAuth usage API."""

from __future__ import annotations

from llm_usage.providers.claude.models import ClaudeUsageResponse
from llm_usage.providers.http import DEFAULT_TIMEOUT, ProviderClient

ANTHROPIC_API_BASE = "https://api.anthropic.com"
USAGE_ENDPOINT = "/api/oauth/usage"
OAUTH_BETA = "oauth-2025-04-20"


class ClaudeClient(ProviderClient):
    """Fetches subscription usage with a Claude OAuth access token."""

    base_url = ANTHROPIC_API_BASE

    def __init__(
        self,
        access_token: str,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str | None = None,
    ):
        super().__init__(timeout=timeout, base_url=base_url)
        self._access_token = access_token

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "anthropic-beta": OAUTH_BETA,
        }

    async def get_usage(self) -> ClaudeUsageResponse:
        """Fetch current usage windows."""
        return await self._request("GET", USAGE_ENDPOINT, ClaudeUsageResponse)
