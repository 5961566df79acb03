"""Best-effort cached lookup of secondary (subscription) data."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from llm_usage.cache import CacheError, CacheManager
from llm_usage.logging import get_logger
from llm_usage.providers.http import ProviderAPIError

log = get_logger("llm_usage.providers.subscription")

DEFAULT_SUBSCRIPTION_TTL = timedelta(minutes=30)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def fetch_subscription(
    cache: CacheManager | None,
    key: str,
    schema: type[ModelT],
    fetch: Callable[[], Awaitable[ModelT]],
    ttl: timedelta | float = DEFAULT_SUBSCRIPTION_TTL,
) -> ModelT | None:
    """Return cached subscription data, fetching and caching it on a miss.

    Never raises for vendor or cache failures: any of them simply yields
    None (or skips the cache write), so the caller omits the annex.

    Args:
        cache: Cache to consult, or None to always fetch.
        key: Cache key (see :func:`llm_usage.cache.hash_key`).
        schema: Model the cached payload is re-validated against.
        fetch: Coroutine factory performing the vendor call.
        ttl: How long a fresh result stays cached.
    """
    if cache is not None:
        try:
            found, data = cache.get(key)
        except CacheError as e:
            log.debug("subscription_cache_unreadable", key=key, error=str(e))
            found, data = False, None

        if found:
            try:
                result = schema.model_validate(data)
            except ValidationError:
                log.debug("subscription_cache_invalid", key=key)
            else:
                log.debug("subscription_cache_hit", key=key)
                return result

    try:
        result = await fetch()
    except ProviderAPIError as e:
        log.debug("subscription_fetch_failed", key=key, error=str(e))
        return None

    if cache is not None:
        try:
            cache.set(key, result.model_dump(mode="json", by_alias=True), ttl)
        except CacheError as e:
            log.debug("subscription_cache_write_failed", key=key, error=str(e))

    return result
