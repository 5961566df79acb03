"""MiniMax provider adapter.

MiniMax reports utilization as the share of the interval still *unused*:
``(total - used) / total * 100``. This is the opposite convention to the
other providers and is kept as the vendor defines it.
"""

from __future__ import annotations

from datetime import timedelta

from llm_usage.cache import CacheManager, hash_key
from llm_usage.providers.base import Provider, Usage, UsageWindow, from_epoch_millis
from llm_usage.providers.http import DEFAULT_TIMEOUT
from llm_usage.providers.minimax.client import MiniMaxClient
from llm_usage.providers.minimax.models import (
    CodingPlanResponse,
    MiniMaxSubscriptionResponse,
    ModelRemain,
)
from llm_usage.providers.subscription import DEFAULT_SUBSCRIPTION_TTL, fetch_subscription

PROVIDER_ID = "minimax"
PROVIDER_NAME = "MiniMax"
FALLBACK_LABEL = "MiniMax"
SUBSCRIPTION_CACHE_PREFIX = "minimax_subscription"


def model_remain_window(item: ModelRemain) -> UsageWindow:
    """Window for one model's interval quota."""
    total = float(item.current_interval_total_count)
    used = float(item.current_interval_usage_count)

    utilization = 0.0
    if total > 0:
        utilization = (total - used) / total * 100

    return UsageWindow(
        label=item.model_name or FALLBACK_LABEL,
        utilization=utilization,
        resets_at=from_epoch_millis(item.end_time) if item.end_time > 0 else None,
        limit=total,
        used=used,
        remaining=float(item.remains_time),
    )


def normalize_usage(response: CodingPlanResponse) -> Usage:
    """One window per model, in response order."""
    return Usage(
        provider_id=PROVIDER_ID,
        windows=[model_remain_window(item) for item in response.model_remains],
    )


class MiniMaxProvider(Provider):
    """Usage for one MiniMax account (cookie + GroupId)."""

    def __init__(
        self,
        cookie: str,
        group_id: str,
        cache: CacheManager | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        subscription_ttl: timedelta | float = DEFAULT_SUBSCRIPTION_TTL,
    ):
        self._client = MiniMaxClient(cookie, group_id, timeout=timeout)
        self._cache = cache
        self._subscription_ttl = subscription_ttl

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    @property
    def id(self) -> str:
        return PROVIDER_ID

    async def get_usage(self) -> Usage:
        response = await self._client.get_usage()
        usage = normalize_usage(response)

        sub = await self.get_subscription()
        if sub is not None:
            usage.extra["subscription"] = {"status": sub.base_resp.status_msg}
        return usage

    async def get_subscription(self) -> MiniMaxSubscriptionResponse | None:
        """Cached resource-package lookup; None when unavailable."""
        return await fetch_subscription(
            self._cache,
            hash_key(SUBSCRIPTION_CACHE_PREFIX, self._client.cookie + self._client.group_id),
            MiniMaxSubscriptionResponse,
            self._client.get_subscription,
            ttl=self._subscription_ttl,
        )

    async def close(self) -> None:
        await self._client.close()
