"""llm-usage: usage and quota statistics across LLM provider subscriptions."""

__version__ = "0.1.0"
