"""Claude (Anthropic OAuth) usage provider."""

from llm_usage.providers.claude.client import ClaudeClient
from llm_usage.providers.claude.provider import ClaudeProvider

__all__ = ["ClaudeClient", "ClaudeProvider"]
