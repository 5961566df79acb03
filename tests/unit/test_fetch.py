"""Tests for concurrent usage fetching."""

import asyncio

import pytest

from llm_usage.providers.base import Usage, UsageWindow
from llm_usage.providers.http import ProviderAPIError
from llm_usage.usage.fetch import fetch_all
from llm_usage.usage.resolver import ProviderInstance


class TestFetchAll:
    """Tests for fetch_all."""

    @pytest.mark.asyncio
    async def test_empty(self):
        stats = await fetch_all([])
        assert stats.is_empty

    @pytest.mark.asyncio
    async def test_failure_isolated_and_order_kept(self, fake_provider):
        instances = [
            ProviderInstance(fake_provider("claude", "Claude", 10.0), "default"),
            ProviderInstance(
                fake_provider("kimi", "Kimi", error=ProviderAPIError("API error (status 401)")),
                "work",
            ),
            ProviderInstance(fake_provider("zai", "Z.AI", 30.0), ""),
        ]

        stats = await fetch_all(instances)

        assert [u.provider_id for u in stats.providers] == ["claude", "kimi", "zai"]
        assert stats.providers[1].error == "Kimi: API error (status 401)"
        assert stats.providers[1].windows == []
        assert stats.providers[0].error is None
        assert stats.providers[2].windows[0].utilization == 30.0
        assert not stats.all_failed

    @pytest.mark.asyncio
    async def test_account_injection(self, fake_provider):
        instances = [
            ProviderInstance(fake_provider("kimi"), "work"),
            ProviderInstance(fake_provider("kimi"), "default"),
            ProviderInstance(fake_provider("zai", "Z.AI"), ""),
        ]

        stats = await fetch_all(instances)

        assert stats.providers[0].extra["account"] == "work"
        assert stats.providers[1].extra["account"] == "default"
        assert "account" not in stats.providers[2].extra

    @pytest.mark.asyncio
    async def test_error_rows_carry_no_account(self, fake_provider):
        instance = ProviderInstance(fake_provider(error=RuntimeError("boom")), "work")
        stats = await fetch_all([instance])
        assert stats.providers[0].extra == {}
        assert stats.all_failed

    @pytest.mark.asyncio
    async def test_providers_closed(self, fake_provider):
        ok = fake_provider("claude")
        failing = fake_provider("kimi", error=RuntimeError("boom"))

        await fetch_all([ProviderInstance(ok, ""), ProviderInstance(failing, "")])

        assert ok.closed
        assert failing.closed

    @pytest.mark.asyncio
    async def test_close_failure_keeps_results(self, fake_provider):
        class BrokenClose(fake_provider):
            async def close(self) -> None:
                raise RuntimeError("close failed")

        other = fake_provider("zai", "Z.AI", 55.0)
        broken = BrokenClose("claude", "Claude", 42.0)

        stats = await fetch_all([ProviderInstance(broken, ""), ProviderInstance(other, "")])

        assert [u.provider_id for u in stats.providers] == ["claude", "zai"]
        assert stats.providers[0].windows[0].utilization == 42.0
        assert other.closed

    @pytest.mark.asyncio
    async def test_close_disabled(self, fake_provider):
        provider = fake_provider()
        await fetch_all([ProviderInstance(provider, "")], close=False)
        assert not provider.closed

    @pytest.mark.asyncio
    async def test_runs_concurrently(self, fake_provider):
        """A slow provider does not hold up faster ones or reorder results."""
        started = []

        class SlowProvider(fake_provider):
            def __init__(self, provider_id, delay):
                super().__init__(provider_id)
                self._delay = delay

            async def get_usage(self) -> Usage:
                started.append(self.id)
                await asyncio.sleep(self._delay)
                return Usage(self.id, [UsageWindow("w", self._delay)])

        instances = [
            ProviderInstance(SlowProvider("claude", 0.05), ""),
            ProviderInstance(SlowProvider("kimi", 0.0), ""),
        ]

        stats = await asyncio.wait_for(fetch_all(instances), timeout=1.0)

        assert started == ["claude", "kimi"]
        assert [u.provider_id for u in stats.providers] == ["claude", "kimi"]
