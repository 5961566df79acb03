"""Claude provider adapter."""

from __future__ import annotations

from llm_usage.providers.base import Provider, Usage, UsageWindow
from llm_usage.providers.claude.client import ClaudeClient
from llm_usage.providers.claude.models import ClaudeUsageResponse
from llm_usage.providers.http import DEFAULT_TIMEOUT

PROVIDER_ID = "claude"
PROVIDER_NAME = "Claude"

# Response field -> window label, in display order
WINDOW_LABELS: tuple[tuple[str, str], ...] = (
    ("five_hour", "5-Hour"),
    ("seven_day", "7-Day"),
    ("seven_day_oauth_apps", "7-Day OAuth Apps"),
    ("seven_day_opus", "7-Day Opus"),
    ("seven_day_sonnet", "7-Day Sonnet"),
    ("iguana_necktie", "Experimental"),
)


def normalize_usage(response: ClaudeUsageResponse) -> Usage:
    """Map each present window 1:1 and attach enabled extra usage."""
    usage = Usage(provider_id=PROVIDER_ID)
    for field_name, label in WINDOW_LABELS:
        window = getattr(response, field_name)
        if window is None:
            continue
        usage.windows.append(
            UsageWindow(
                label=label,
                utilization=window.utilization,
                resets_at=window.resets_at,
            )
        )

    extra = response.extra_usage
    if extra is not None and extra.is_enabled:
        usage.extra["extra_usage"] = {
            "utilization": extra.utilization,
            "used_credits": extra.used_credits,
            "monthly_limit": extra.monthly_limit,
        }
    return usage


class ClaudeProvider(Provider):
    """Usage for one Claude account (OAuth)."""

    def __init__(self, access_token: str, timeout: float = DEFAULT_TIMEOUT):
        self._client = ClaudeClient(access_token, timeout=timeout)

    @property
    def name(self) -> str:
        return PROVIDER_NAME

    @property
    def id(self) -> str:
        return PROVIDER_ID

    async def get_usage(self) -> Usage:
        response = await self._client.get_usage()
        return normalize_usage(response)

    async def close(self) -> None:
        await self._client.close()
