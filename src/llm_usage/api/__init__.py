"""Read-only HTTP API."""

from llm_usage.api.server import UsageAPIServer, run_server

__all__ = ["UsageAPIServer", "run_server"]
