"""Pytest fixtures for llm-usage tests."""

from __future__ import annotations

import os
from typing import Any

import httpx
import pytest

from llm_usage.cache import CacheManager
from llm_usage.config import get_settings
from llm_usage.credentials.store import CredentialStore
from llm_usage.providers.base import Provider, Usage, UsageWindow
from llm_usage.providers.registry import ProviderResources


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point every path setting at a temporary directory.

    Keeps tests away from the real ``~/.config``, ``~/.cache`` and Claude
    CLI credentials, and makes each test start with fresh settings.
    """
    for key in list(os.environ):
        if key.startswith("LLM_USAGE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("LLM_USAGE_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("LLM_USAGE_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv(
        "LLM_USAGE_CLAUDE_CLI_CREDENTIALS_PATH", str(tmp_path / "claude-cli" / ".credentials.json")
    )
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def config_dir(tmp_path):
    """Credential store directory (not created)."""
    return tmp_path / "config"


@pytest.fixture
def claude_cli_path(tmp_path):
    """Location of the Claude CLI credentials file (not created)."""
    return tmp_path / "claude-cli" / ".credentials.json"


@pytest.fixture
def store(config_dir):
    """Credential store backed by a temporary directory."""
    return CredentialStore(config_dir)


@pytest.fixture
def cache_manager(tmp_path):
    """Cache manager backed by a temporary directory."""
    return CacheManager(tmp_path / "cache")


@pytest.fixture
def resources(cache_manager, claude_cli_path):
    """Provider resources using the temporary cache and CLI path."""
    return ProviderResources(cache=cache_manager, timeout=5.0, claude_cli_path=claude_cli_path)


@pytest.fixture
def mock_response():
    """Build a real httpx.Response for a mocked client."""

    def _create(status_code: int = 200, json_data: Any = None, text: str | None = None):
        request = httpx.Request("GET", "https://example.test")
        if text is not None:
            return httpx.Response(status_code, text=text, request=request)
        return httpx.Response(status_code, json=json_data, request=request)

    return _create


class FakeProvider(Provider):
    """In-memory provider returning a fixed result or raising."""

    def __init__(
        self,
        provider_id: str = "kimi",
        name: str = "Kimi",
        utilization: float = 10.0,
        error: Exception | None = None,
    ):
        self._id = provider_id
        self._name = name
        self._utilization = utilization
        self._error = error
        self.closed = False
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def id(self) -> str:
        return self._id

    async def get_usage(self) -> Usage:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return Usage(
            provider_id=self._id,
            windows=[UsageWindow(label="Window", utilization=self._utilization)],
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider
