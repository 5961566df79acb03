"""Kimi usage provider."""

from llm_usage.providers.kimi.client import KimiClient
from llm_usage.providers.kimi.provider import KimiProvider

__all__ = ["KimiClient", "KimiProvider"]
