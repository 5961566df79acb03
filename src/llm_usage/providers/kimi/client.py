"""Async client for the Kimi billing API."""

from __future__ import annotations

from llm_usage.providers.http import DEFAULT_TIMEOUT, ProviderClient
from llm_usage.providers.kimi.models import KimiSubscriptionResponse, KimiUsageResponse

KIMI_API_BASE = "https://www.kimi.com"
USAGE_ENDPOINT = "/apiv2/kimi.gateway.billing.v1.BillingService/GetUsages"
SUBSCRIPTION_ENDPOINT = "/apiv2/kimi.gateway.order.v1.SubscriptionService/GetSubscription"
USAGE_SCOPES = ["FEATURE_CODING"]


class KimiClient(ProviderClient):
    """Kimi API client authenticated with an API key as bearer token."""

    base_url = KIMI_API_BASE

    def __init__(
        self,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str | None = None,
    ):
        super().__init__(timeout=timeout, base_url=base_url)
        self._api_key = api_key

    @property
    def api_key(self) -> str:
        """API key, used to derive cache keys."""
        return self._api_key

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def get_usage(self) -> KimiUsageResponse:
        """Fetch usage for the coding scope."""
        return await self._request(
            "POST", USAGE_ENDPOINT, KimiUsageResponse, json={"scope": USAGE_SCOPES}
        )

    async def get_subscription(self) -> KimiSubscriptionResponse:
        """Fetch the current plan and feature allowances."""
        return await self._request("POST", SUBSCRIPTION_ENDPOINT, KimiSubscriptionResponse, json={})
