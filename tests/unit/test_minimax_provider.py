"""Tests for the MiniMax provider adapter."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from llm_usage.providers.minimax import MiniMaxProvider
from llm_usage.providers.minimax.client import MiniMaxClient
from llm_usage.providers.minimax.models import CodingPlanResponse, ModelRemain
from llm_usage.providers.minimax.provider import model_remain_window, normalize_usage

CODING_PLAN_PAYLOAD = {
    "model_remains": [
        {
            "start_time": 1_736_924_400_000,
            "end_time": 1_736_942_400_000,
            "remains_time": 3_600_000,
            "current_interval_total_count": 100,
            "current_interval_usage_count": 80,
            "model_name": "MiniMax-M2",
        }
    ],
    "base_resp": {"status_code": 0, "status_msg": "success"},
}


class TestModelRemainWindow:
    """Tests for per-model windows."""

    def test_utilization_counts_unused_share(self):
        window = model_remain_window(
            ModelRemain(current_interval_total_count=100, current_interval_usage_count=80)
        )
        assert window.utilization == 20.0
        assert window.limit == 100.0
        assert window.used == 80.0

    def test_reset_and_remaining(self):
        item = ModelRemain.model_validate(CODING_PLAN_PAYLOAD["model_remains"][0])
        window = model_remain_window(item)
        assert window.label == "MiniMax-M2"
        assert window.resets_at == datetime(2025, 1, 15, 12, tzinfo=UTC)
        assert window.remaining == 3_600_000.0

    def test_no_end_time(self):
        window = model_remain_window(ModelRemain(current_interval_total_count=10))
        assert window.resets_at is None

    def test_zero_total(self):
        window = model_remain_window(ModelRemain())
        assert window.utilization == 0.0
        assert window.label == "MiniMax"

    def test_normalize_usage(self):
        usage = normalize_usage(CodingPlanResponse.model_validate(CODING_PLAN_PAYLOAD))
        assert usage.provider_id == "minimax"
        assert len(usage.windows) == 1

    def test_null_fields_read_as_zero_values(self):
        response = CodingPlanResponse.model_validate_json(
            '{"model_remains": [{"model_name": null, "end_time": null,'
            ' "current_interval_total_count": 50, "current_interval_usage_count": null}],'
            ' "base_resp": null}'
        )
        window = normalize_usage(response).windows[0]
        assert window.label == "MiniMax"
        assert window.resets_at is None
        assert window.utilization == 100.0
        assert response.base_resp.status_code == 0


class TestMiniMaxClient:
    """Tests for the cookie-authenticated client."""

    @pytest.mark.asyncio
    async def test_cookie_header(self):
        client = MiniMaxClient("session=abc", "group-1")
        http = await client._get_client()
        try:
            assert http.headers["Cookie"] == "session=abc"
        finally:
            await client.close()


class TestMiniMaxProvider:
    """Tests for MiniMaxProvider.get_usage."""

    @pytest.mark.asyncio
    async def test_get_usage(self, mock_response, cache_manager):
        provider = MiniMaxProvider("session=abc", "group-1", cache=cache_manager)

        with patch.object(provider._client, "_get_client") as mock_get:
            mock_client = AsyncMock()
            mock_client.request.side_effect = [
                mock_response(200, CODING_PLAN_PAYLOAD),
                mock_response(200, {"base_resp": {"status_code": 0, "status_msg": "active"}}),
            ]
            mock_get.return_value = mock_client

            usage = await provider.get_usage()

        assert usage.windows[0].utilization == 20.0
        assert usage.extra["subscription"] == {"status": "active"}

        usage_call, sub_call = mock_client.request.call_args_list
        assert usage_call.kwargs["params"] == {"GroupId": "group-1"}
        assert sub_call.kwargs["params"] == {
            "GroupId": "group-1",
            "biz_line": "2",
            "cycle_type": "3",
            "resource_package_type": "7",
        }

    @pytest.mark.asyncio
    async def test_subscription_failure_is_suppressed(self, mock_response):
        provider = MiniMaxProvider("session=abc", "group-1")

        with patch.object(provider._client, "_get_client") as mock_get:
            mock_client = AsyncMock()
            mock_client.request.side_effect = [
                mock_response(200, CODING_PLAN_PAYLOAD),
                mock_response(500, text="oops"),
            ]
            mock_get.return_value = mock_client

            usage = await provider.get_usage()

        assert "subscription" not in usage.extra
