"""Kimi provider adapter.

Each usage scope becomes one window, followed by one window per nested
rate limit. Plan details come from a cached subscription lookup.
"""

from __future__ import annotations

import contextlib
from datetime import timedelta
from types import MappingProxyType
from typing import Any

from llm_usage.cache import CacheManager, hash_key
from llm_usage.logging import get_logger
from llm_usage.providers.base import (
    Provider,
    Usage,
    UsageWindow,
    constant_to_title,
    format_timestamp,
    parse_timestamp,
)
from llm_usage.providers.http import DEFAULT_TIMEOUT
from llm_usage.providers.kimi.client import KimiClient
from llm_usage.providers.kimi.models import (
    KimiSubscriptionResponse,
    KimiUsageResponse,
    LimitItem,
    UsageDetail,
    UsageItem,
)
from llm_usage.providers.subscription import DEFAULT_SUBSCRIPTION_TTL, fetch_subscription

log = get_logger("llm_usage.providers.kimi")

PROVIDER_ID = "kimi"
PROVIDER_NAME = "Kimi"
SUBSCRIPTION_CACHE_PREFIX = "kimi_subscription"

STATUS_PREFIX = "SUBSCRIPTION_STATUS_"
LEVEL_PREFIX = "LEVEL_"
FEATURE_PREFIX = "FEATURE_"
TIME_UNIT_PREFIX = "TIME_UNIT_"

SUBSCRIPTION_STATUS_LABELS = MappingProxyType(
    {
        "SUBSCRIPTION_STATUS_ACTIVE": "Active",
        "SUBSCRIPTION_STATUS_CANCELLED": "Cancelled",
        "SUBSCRIPTION_STATUS_EXPIRED": "Expired",
    }
)

MEMBERSHIP_LEVEL_LABELS = MappingProxyType(
    {
        "LEVEL_BASIC": "Basic",
        "LEVEL_STANDARD": "Standard",
        "LEVEL_PREMIUM": "Premium",
    }
)


def _strip_prefix(value: str, prefix: str) -> str:
    return value[len(prefix) :] if value.startswith(prefix) else value


def subscription_status_label(status: str) -> str:
    """``SUBSCRIPTION_STATUS_ACTIVE`` -> ``Active``; unknown values lose the prefix only."""
    return SUBSCRIPTION_STATUS_LABELS.get(status, _strip_prefix(status, STATUS_PREFIX))


def membership_level_label(level: str) -> str:
    """``LEVEL_BASIC`` -> ``Basic``; ``LEVEL_CUSTOM`` -> ``CUSTOM``."""
    return MEMBERSHIP_LEVEL_LABELS.get(level, _strip_prefix(level, LEVEL_PREFIX))


def feature_label(feature: str) -> str:
    """``FEATURE_CODING`` -> ``Coding``."""
    name = _strip_prefix(feature, FEATURE_PREFIX)
    return name[:1].upper() + name[1:].lower()


def scope_label(scope: str) -> str:
    """``FEATURE_CODING`` -> ``Feature Coding``."""
    return constant_to_title(scope)


def rate_limit_label(duration: int, time_unit: str) -> str:
    """``(5, "TIME_UNIT_MINUTE")`` -> ``5-Minute Rate Limit``."""
    unit = _strip_prefix(time_unit, TIME_UNIT_PREFIX).lower()
    unit = unit.removesuffix("s")
    unit = unit[:1].upper() + unit[1:]
    return f"{duration}-{unit} Rate Limit"


def _parse_amount(value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        return None


def _detail_window(label: str, detail: UsageDetail) -> UsageWindow | None:
    """Build a window from a limit/used pair, or None if either is unparseable."""
    limit = _parse_amount(detail.limit)
    used = _parse_amount(detail.used)
    if limit is None or used is None:
        return None

    resets_at = None
    if detail.reset_time:
        with contextlib.suppress(ValueError):
            resets_at = parse_timestamp(detail.reset_time)

    return UsageWindow(
        label=label,
        utilization=used / limit * 100 if limit else 0.0,
        resets_at=resets_at,
        limit=limit,
        used=used,
        remaining=limit - used,
    )


def scope_window(item: UsageItem) -> UsageWindow | None:
    """Window for a usage scope."""
    return _detail_window(scope_label(item.scope), item.detail)


def limit_window(limit: LimitItem) -> UsageWindow | None:
    """Window for a nested rate limit."""
    label = rate_limit_label(limit.window.duration, limit.window.time_unit)
    return _detail_window(label, limit.detail)


def normalize_usage(response: KimiUsageResponse) -> Usage:
    """Flatten scopes and their rate limits into windows, in response order."""
    usage = Usage(provider_id=PROVIDER_ID)
    for item in response.usages:
        window = scope_window(item)
        if window is not None:
            usage.windows.append(window)
        for limit in item.limits:
            window = limit_window(limit)
            if window is not None:
                usage.windows.append(window)
    return usage


def subscription_extra(sub: KimiSubscriptionResponse) -> dict[str, Any]:
    """Build the ``subscription`` annex."""
    result: dict[str, Any] = {"subscribed": sub.subscribed}

    if sub.subscription is not None:
        result["plan"] = {
            "title": sub.subscription.goods.title,
            "level": membership_level_label(sub.subscription.goods.membership_level),
            "status": subscription_status_label(sub.subscription.status),
        }
        if sub.subscription.current_end_time:
            with contextlib.suppress(ValueError):
                result["expires_at"] = format_timestamp(
                    parse_timestamp(sub.subscription.current_end_time)
                )

    if sub.memberships:
        result["features"] = [
            {
                "feature": feature_label(m.feature),
                "left": m.left_count,
                "total": m.total_count,
            }
            for m in sub.memberships
        ]

    return result


class KimiProvider(Provider):
    """Usage for one Kimi account (API key)."""

    def __init__(
        self,
        api_key: str,
        cache: CacheManager | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        subscription_ttl: timedelta | float = DEFAULT_SUBSCRIPTION_TTL,
    ):
        self._client = KimiClient(api_key, timeout=timeout)
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
            usage.extra["subscription"] = subscription_extra(sub)
        return usage

    async def get_subscription(self) -> KimiSubscriptionResponse | None:
        """Cached plan lookup; None when unavailable."""
        return await fetch_subscription(
            self._cache,
            hash_key(SUBSCRIPTION_CACHE_PREFIX, self._client.api_key),
            KimiSubscriptionResponse,
            self._client.get_subscription,
            ttl=self._subscription_ttl,
        )

    async def close(self) -> None:
        await self._client.close()
