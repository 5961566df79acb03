"""Response schema of the Anthropic OAuth usage endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from llm_usage.providers.base import drop_null_fields, parse_timestamp


class ClaudeWindow(BaseModel):
    """One rate-limit window; ``utilization`` is already a percentage."""

    model_config = ConfigDict(extra="ignore")

    utilization: float = 0.0
    resets_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """A null utilization counts as 0."""
        return drop_null_fields(data)

    @field_validator("resets_at", mode="before")
    @classmethod
    def parse_resets_at(cls, v: Any) -> Any:
        """Accept RFC 3339 with nanosecond precision."""
        if isinstance(v, str):
            return parse_timestamp(v)
        return v


class ExtraUsage(BaseModel):
    """Paid credit overlay on top of the subscription windows."""

    model_config = ConfigDict(extra="ignore")

    is_enabled: bool = False
    monthly_limit: float | None = None
    used_credits: float | None = None
    utilization: float | None = None


class ClaudeUsageResponse(BaseModel):
    """Body of ``GET /api/oauth/usage``. Every window is optional."""

    model_config = ConfigDict(extra="ignore")

    five_hour: ClaudeWindow | None = None
    seven_day: ClaudeWindow | None = None
    seven_day_oauth_apps: ClaudeWindow | None = None
    seven_day_opus: ClaudeWindow | None = None
    seven_day_sonnet: ClaudeWindow | None = None
    iguana_necktie: ClaudeWindow | None = None
    extra_usage: ExtraUsage | None = None
