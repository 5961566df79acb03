"""Z.AI provider adapter."""

from __future__ import annotations

from llm_usage.providers.base import (
    Provider,
    Usage,
    UsageWindow,
    constant_to_title,
    from_epoch_millis,
)
from llm_usage.providers.http import DEFAULT_TIMEOUT
from llm_usage.providers.zai.client import ZaiClient
from llm_usage.providers.zai.models import QuotaLimit, ZaiQuotaResponse

PROVIDER_ID = "zai"
PROVIDER_NAME = "Z.AI"


def quota_window(limit: QuotaLimit) -> UsageWindow:
    """Window for one quota bucket.

    Uses the vendor's percentage when given, else derives it from the
    used amount and bucket size.
    """
    if limit.percentage is not None:
        utilization = limit.percentage
    elif limit.usage and limit.current_value is not None:
        utilization = limit.current_value / limit.usage * 100
    else:
        utilization = 0.0

    remaining = limit.remaining
    if remaining is None and limit.usage is not None and limit.current_value is not None:
        remaining = limit.usage - limit.current_value

    return UsageWindow(
        label=constant_to_title(limit.type) or PROVIDER_NAME,
        utilization=utilization,
        resets_at=from_epoch_millis(limit.next_reset_time) if limit.next_reset_time else None,
        limit=limit.usage,
        used=limit.current_value,
        remaining=remaining,
    )


def normalize_usage(response: ZaiQuotaResponse) -> Usage:
    return Usage(
        provider_id=PROVIDER_ID,
        windows=[quota_window(limit) for limit in response.data.limits],
    )


class ZaiProvider(Provider):
    """Usage for one Z.AI account (API key)."""

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT):
        self._client = ZaiClient(api_key, timeout=timeout)

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    @property
    def id(self) -> str:
        return PROVIDER_ID

    async def get_usage(self) -> Usage:
        response = await self._client.get_quota()
        return normalize_usage(response)

    async def close(self) -> None:
        await self._client.close()
