"""Tests for the Claude provider adapter."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from llm_usage.providers.claude import ClaudeProvider
from llm_usage.providers.claude.client import ClaudeClient
from llm_usage.providers.claude.models import ClaudeUsageResponse
from llm_usage.providers.claude.provider import normalize_usage
from llm_usage.providers.http import ProviderAPIError

USAGE_PAYLOAD = {
    "five_hour": {"utilization": 42.0, "resets_at": "2025-01-15T15:00:00.123456789Z"},
    "seven_day": {"utilization": 12.5, "resets_at": "2025-01-20T00:00:00Z"},
    "seven_day_opus": None,
    "seven_day_sonnet": {"utilization": 3.0, "resets_at": None},
    "extra_usage": {
        "is_enabled": True,
        "monthly_limit": 50.0,
        "used_credits": 12.34,
        "utilization": 24.68,
    },
}


class TestNormalizeUsage:
    """Tests for mapping the vendor response."""

    def test_windows_in_order(self):
        usage = normalize_usage(ClaudeUsageResponse.model_validate(USAGE_PAYLOAD))

        assert usage.provider_id == "claude"
        assert [w.label for w in usage.windows] == ["5-Hour", "7-Day", "7-Day Sonnet"]
        assert usage.windows[0].utilization == 42.0
        assert usage.windows[0].resets_at == datetime(2025, 1, 15, 15, 0, 0, 123456, tzinfo=UTC)
        assert usage.windows[2].resets_at is None

    def test_extra_usage_enabled(self):
        usage = normalize_usage(ClaudeUsageResponse.model_validate(USAGE_PAYLOAD))
        assert usage.extra["extra_usage"] == {
            "utilization": 24.68,
            "used_credits": 12.34,
            "monthly_limit": 50.0,
        }

    def test_extra_usage_disabled(self):
        payload = dict(USAGE_PAYLOAD, extra_usage={"is_enabled": False, "monthly_limit": 50.0})
        usage = normalize_usage(ClaudeUsageResponse.model_validate(payload))
        assert "extra_usage" not in usage.extra

    def test_empty_response(self):
        usage = normalize_usage(ClaudeUsageResponse.model_validate({}))
        assert usage.windows == []
        assert usage.extra == {}

    def test_experimental_window(self):
        usage = normalize_usage(
            ClaudeUsageResponse.model_validate({"iguana_necktie": {"utilization": 1.0}})
        )
        assert [w.label for w in usage.windows] == ["Experimental"]

    def test_null_utilization_is_zero(self):
        usage = normalize_usage(
            ClaudeUsageResponse.model_validate_json(
                '{"five_hour": {"utilization": null, "resets_at": null}}'
            )
        )
        assert usage.windows[0].utilization == 0.0
        assert usage.windows[0].resets_at is None


class TestClaudeClient:
    """Tests for the OAuth usage client."""

    @pytest.mark.asyncio
    async def test_auth_headers(self):
        client = ClaudeClient("oauth-token")
        http = await client._get_client()
        try:
            assert http.headers["Authorization"] == "Bearer oauth-token"
            assert http.headers["anthropic-beta"] == "oauth-2025-04-20"
        finally:
            await client.close()


class TestClaudeProvider:
    """Tests for ClaudeProvider.get_usage."""

    def test_identity(self):
        provider = ClaudeProvider("tok")
        assert provider.id == "claude"
        assert provider.name == "Claude"

    @pytest.mark.asyncio
    async def test_get_usage(self, mock_response):
        provider = ClaudeProvider("tok")

        with patch.object(provider._client, "_get_client") as mock_get:
            mock_client = AsyncMock()
            mock_client.request.return_value = mock_response(200, USAGE_PAYLOAD)
            mock_get.return_value = mock_client

            usage = await provider.get_usage()

        assert len(usage.windows) == 3
        mock_client.request.assert_called_once_with(
            method="GET", url="/api/oauth/usage", params=None, json=None
        )

    @pytest.mark.asyncio
    async def test_get_usage_api_error(self, mock_response):
        provider = ClaudeProvider("expired-token")

        with patch.object(provider._client, "_get_client") as mock_get:
            mock_client = AsyncMock()
            mock_client.request.return_value = mock_response(401, text="invalid token")
            mock_get.return_value = mock_client

            with pytest.raises(ProviderAPIError, match="status 401"):
                await provider.get_usage()
