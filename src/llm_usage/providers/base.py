"""Normalized usage model shared by every provider.

Each provider adapter turns its vendor response into a :class:`Usage` made
of :class:`UsageWindow` buckets. One fetch across all resolved providers
yields a :class:`UsageStats`.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

WARNING_THRESHOLD = 75.0
CRITICAL_THRESHOLD = 90.0

SEVERITY_NORMAL = "normal"
SEVERITY_WARNING = "warning"
SEVERITY_CRITICAL = "critical"

# Python datetimes carry microseconds; vendors may send nanoseconds
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp into an aware datetime.

    Accepts a trailing ``Z`` and fractional seconds beyond microsecond
    precision (truncated). Naive values are taken as UTC.

    Returns:
        None for a missing or empty value.

    Raises:
        ValueError: The value is not a valid timestamp.
    """
    if not value:
        return None
    text = _FRACTION_RE.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def from_epoch_millis(millis: int | float) -> datetime:
    """Convert Unix epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(millis / 1000, tz=UTC)


def format_timestamp(value: datetime | None) -> str | None:
    """Render a datetime as ISO-8601, or None."""
    if value is None:
        return None
    return value.isoformat()


def constant_to_title(value: str) -> str:
    """Turn a CONSTANT_CASE identifier into title-cased words.

    ``FEATURE_CODING`` becomes ``Feature Coding``.
    """
    return " ".join(part[:1].upper() + part[1:].lower() for part in value.split("_") if part)


def drop_null_fields(data: Any) -> Any:
    """Remove ``null`` members from a JSON object so fields fall back to their defaults.

    Vendors send ``null`` for amounts, names and lists they have no value
    for. Used as a ``mode="before"`` model validator on response schemas.
    """
    if isinstance(data, dict):
        return {k: v for k, v in data.items() if v is not None}
    return data


@dataclass
class UsageWindow:
    """One quota or rate-limit bucket."""

    label: str
    utilization: float
    resets_at: datetime | None = None
    limit: float | None = None
    used: float | None = None
    remaining: float | None = None

    def time_until_reset(self, now: datetime | None = None) -> timedelta | None:
        """Time left before the window resets, if the reset time is known."""
        if self.resets_at is None:
            return None
        return self.resets_at - (now or datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON wire shape."""
        result: dict[str, Any] = {
            "label": self.label,
            "utilization": self.utilization,
            "resets_at": format_timestamp(self.resets_at),
        }
        if self.limit is not None:
            result["limit"] = self.limit
        if self.used is not None:
            result["used"] = self.used
        if self.remaining is not None:
            result["remaining"] = self.remaining
        return result


@dataclass
class Usage:
    """Usage for one provider account.

    When ``error`` is set the windows and extra annex are not meaningful.
    """

    provider_id: str = ""
    windows: list[UsageWindow] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def account(self) -> str | None:
        """Account name attached by the fetch, if any."""
        value = self.extra.get("account")
        return value if isinstance(value, str) else None

    def max_utilization(self) -> float:
        """Highest window utilization, 0 when failed or empty."""
        if self.error or not self.windows:
            return 0.0
        return max(w.utilization for w in self.windows)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON wire shape."""
        result: dict[str, Any] = {
            "provider": self.provider_id,
            "windows": [w.to_dict() for w in self.windows],
        }
        if self.extra:
            result["extra"] = self.extra
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class UsageStats:
    """Aggregate of one fetch, in resolution order."""

    providers: list[Usage] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Nothing was resolved (no providers configured)."""
        return not self.providers

    @property
    def all_failed(self) -> bool:
        """Every resolved provider returned an error."""
        return bool(self.providers) and all(u.error for u in self.providers)

    def max_utilization(self) -> float:
        """Highest utilization across all successful entries."""
        return max((u.max_utilization() for u in self.providers), default=0.0)

    def severity_class(self) -> str:
        """Bucket the maximum utilization into normal/warning/critical."""
        peak = self.max_utilization()
        if peak >= CRITICAL_THRESHOLD:
            return SEVERITY_CRITICAL
        if peak >= WARNING_THRESHOLD:
            return SEVERITY_WARNING
        return SEVERITY_NORMAL

    def provider_by_id(self, provider_id: str) -> Usage | None:
        """First entry for a provider id, if any."""
        for usage in self.providers:
            if usage.provider_id == provider_id:
                return usage
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON wire shape."""
        return {"providers": [u.to_dict() for u in self.providers]}


class Provider(ABC):
    """Contract every vendor adapter implements."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable lowercase provider id."""

    @abstractmethod
    async def get_usage(self) -> Usage:
        """Fetch and normalize current usage.

        Raises:
            Exception: The primary usage call failed. Secondary lookups
                never raise.
        """

    async def close(self) -> None:  # noqa: B027
        """Release any network resources held by the adapter."""
