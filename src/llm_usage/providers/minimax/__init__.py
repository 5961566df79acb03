"""MiniMax usage provider."""

from llm_usage.providers.minimax.client import MiniMaxClient
from llm_usage.providers.minimax.provider import MiniMaxProvider

__all__ = ["MiniMaxClient", "MiniMaxProvider"]
