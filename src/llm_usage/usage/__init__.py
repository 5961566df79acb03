"""Provider resolution, concurrent fetch and report rendering."""

from llm_usage.usage.fetch import fetch_all
from llm_usage.usage.resolver import ProviderInstance, resolve_providers

__all__ = ["ProviderInstance", "fetch_all", "resolve_providers"]
