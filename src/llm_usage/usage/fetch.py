"""Concurrent fetch across resolved provider instances."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from llm_usage.logging import get_logger
from llm_usage.providers.base import Usage, UsageStats
from llm_usage.usage.resolver import ProviderInstance

log = get_logger("llm_usage.usage.fetch")


def error_usage(instance: ProviderInstance, error: BaseException) -> Usage:
    """Row for an instance whose usage call failed."""
    provider = instance.provider
    return Usage(provider_id=provider.id, error=f"{provider.name}: {error}")


async def fetch_all(instances: Sequence[ProviderInstance], close: bool = True) -> UsageStats:
    """Fetch usage from every instance concurrently.

    Each task writes only its own pre-allocated slot, so the result order
    matches ``instances`` regardless of completion order. A failing
    provider becomes an error row and never cancels its siblings.

    Args:
        instances: Resolved provider instances.
        close: Close each adapter's HTTP client once its fetch completes.
    """
    slots: list[Usage] = [Usage() for _ in instances]
    lock = asyncio.Lock()

    async def fetch_one(index: int, instance: ProviderInstance) -> None:
        provider = instance.provider
        try:
            try:
                usage = await provider.get_usage()
            except Exception as e:
                log.warning(
                    "provider_fetch_failed",
                    provider=provider.id,
                    account=instance.account_name,
                    error=str(e),
                )
                result = error_usage(instance, e)
                async with lock:
                    slots[index] = result
                return

            async with lock:
                if instance.account_name:
                    usage.extra["account"] = instance.account_name
                slots[index] = usage
            log.debug(
                "provider_fetch_complete",
                provider=provider.id,
                account=instance.account_name,
                windows=len(usage.windows),
            )
        finally:
            if close:
                try:
                    await provider.close()
                except Exception as e:
                    log.debug("provider_close_failed", provider=provider.id, error=str(e))

    await asyncio.gather(*(fetch_one(i, inst) for i, inst in enumerate(instances)))

    # Slots that were never written keep an empty provider id
    return UsageStats(providers=[usage for usage in slots if usage.provider_id])
