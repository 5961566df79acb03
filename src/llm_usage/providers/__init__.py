"""Provider adapters and the normalized usage model."""

from llm_usage.providers.base import Provider, Usage, UsageStats, UsageWindow
from llm_usage.providers.http import ProviderAPIError, ProviderResponseError

__all__ = [
    "Provider",
    "ProviderAPIError",
    "ProviderResponseError",
    "Usage",
    "UsageStats",
    "UsageWindow",
]
