"""Async client for the Z.AI quota monitor API."""

from __future__ import annotations

from llm_usage.providers.http import DEFAULT_TIMEOUT, ProviderAPIError, ProviderClient
from llm_usage.providers.zai.models import ZaiQuotaResponse

ZAI_API_BASE = "https://api.z.ai"
QUOTA_ENDPOINT = "/api/monitor/usage/quota/limit"


class ZaiClient(ProviderClient):
    """Z.AI client authenticated with an API key as bearer token."""

    base_url = ZAI_API_BASE

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str | None = None,
    ):
        super().__init__(timeout=timeout, base_url=base_url)
        self._api_key = api_key

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def get_quota(self) -> ZaiQuotaResponse:
        """Fetch quota buckets.

        Raises:
            ProviderAPIError: Transport failure, non-200 status, or an
                envelope with ``success: false``.
        """
        response = await self._request("GET", QUOTA_ENDPOINT, ZaiQuotaResponse)
        if not response.success:
            raise ProviderAPIError(
                f"API error: {response.msg or 'request unsuccessful'}",
                status_code=response.code,
            )
        return response
