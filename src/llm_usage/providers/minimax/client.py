"""Async client for the MiniMax platform API (browser cookie auth)."""

from __future__ import annotations

from llm_usage.providers.http import DEFAULT_TIMEOUT, ProviderClient
from llm_usage.providers.minimax.models import CodingPlanResponse, MiniMaxSubscriptionResponse

MINIMAX_API_BASE = "https://platform.minimax.io"
CODING_PLAN_ENDPOINT = "/v1/api/openplatform/coding_plan/remains"
SUBSCRIPTION_ENDPOINT = "/v1/api/openplatform/charge/combo/cycle_audio_resource_package"


class MiniMaxClient(ProviderClient):
    """MiniMax client sending the raw session cookie and the account GroupId."""

    base_url = MINIMAX_API_BASE

    def __init__(
        self,
        cookie: str,
        group_id: str,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str | None = None,
    ):
        super().__init__(timeout=timeout, base_url=base_url)
        self._cookie = cookie
        self._group_id = group_id

    @property
    def cookie(self) -> str:
        return self._cookie

    @property
    def group_id(self) -> str:
        return self._group_id

    def _headers(self) -> dict[str, str]:
        return {"Cookie": self._cookie}

    async def get_usage(self) -> CodingPlanResponse:
        """Fetch remaining coding-plan quota per model."""
        return await self._request(
            "GET", CODING_PLAN_ENDPOINT, CodingPlanResponse, params={"GroupId": self._group_id}
        )

    async def get_subscription(self) -> MiniMaxSubscriptionResponse:
        """Fetch the coding-plan resource package."""
        params = {
            "GroupId": self._group_id,
            "biz_line": "2",
            "cycle_type": "3",
            "resource_package_type": "7",
        }
        return await self._request(
            "GET", SUBSCRIPTION_ENDPOINT, MiniMaxSubscriptionResponse, params=params
        )
