"""Z.AI usage provider."""

from llm_usage.providers.zai.client import ZaiClient
from llm_usage.providers.zai.provider import ZaiProvider

__all__ = ["ZaiClient", "ZaiProvider"]
