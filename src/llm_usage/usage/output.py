"""Rendering of :class:`UsageStats` for the terminal, JSON and status bars.

Everything here is a pure function of its inputs; callers do the printing.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Any

import click

from llm_usage.providers.base import UsageStats, UsageWindow, parse_timestamp

BAR_WIDTH = 20
BAR_FULL = "█"
BAR_EMPTY = "░"

WIDGET_TITLE = "LLM Usage"
WIDGET_ERROR_TEXT = "LLM: Error"
WIDGET_ERROR_CLASS = "error"

PROVIDER_DISPLAY_NAMES = MappingProxyType(
    {
        "claude": "Claude (Pro/Max Subscription)",
        "kimi": "Kimi",
        "zai": "Z.AI",
        "minimax": "MiniMax",
    }
)

PROVIDER_SHORT_NAMES = MappingProxyType({"claude": "C", "kimi": "K", "zai": "Z", "minimax": "M"})

STATUS_COLORS = MappingProxyType({"Active": "green", "Cancelled": "yellow", "Expired": "red"})


def provider_display_name(provider_id: str) -> str:
    """Long display name used in reports."""
    return PROVIDER_DISPLAY_NAMES.get(provider_id, provider_id.upper())


def provider_short_name(provider_id: str) -> str:
    """One-letter tag used in the status-bar text."""
    return PROVIDER_SHORT_NAMES.get(provider_id, provider_id[:1].upper())


def format_duration(delta: timedelta) -> str:
    """Render a countdown as ``1d 2h 3m``; negative durations are ``expired``."""
    if delta < timedelta(0):
        return "expired"

    total_minutes = int(delta.total_seconds()) // 60
    days, rem = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rem, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)


def render_progress_bar(percentage: float, width: int = BAR_WIDTH) -> str:
    """Fixed-width bar; the filled portion is clamped to the bar."""
    filled = max(0, min(int(percentage / 100 * width), width))
    return BAR_FULL * filled + BAR_EMPTY * (width - filled)


def _account_suffix(extra: dict[str, Any]) -> str:
    account = extra.get("account")
    return f" ({account})" if account else ""


def format_json(stats: UsageStats) -> str:
    """Indented JSON document of the aggregate."""
    return json.dumps(stats.to_dict(), indent=2, ensure_ascii=False)


def build_waybar(stats: UsageStats, now: datetime | None = None) -> dict[str, Any]:
    """Status-bar widget object ``{text, tooltip, class, percentage}``."""
    text_parts = []
    tooltip = [WIDGET_TITLE, ""]

    for usage in stats.providers:
        name = provider_display_name(usage.provider_id)
        if usage.error:
            tooltip.append(f"{name}: Error")
            continue

        if usage.windows:
            first = usage.windows[0]
            text_parts.append(f"{provider_short_name(usage.provider_id)}:{first.utilization:.0f}%")

        suffix = _account_suffix(usage.extra)
        for window in usage.windows:
            line = f"{name}{suffix} {window.label}: {window.utilization:.1f}%"
            remaining = window.time_until_reset(now)
            if remaining is not None:
                line += f" (resets in {format_duration(remaining)})"
            tooltip.append(line)

    css_class = WIDGET_ERROR_CLASS if stats.all_failed else stats.severity_class()
    return {
        "text": " ".join(text_parts),
        "tooltip": "\n".join(tooltip),
        "class": css_class,
        "percentage": max(0, min(int(stats.max_utilization()), 100)),
    }


def waybar_error(message: str) -> dict[str, Any]:
    """Status-bar widget object for a failure before any fetch."""
    return {
        "text": WIDGET_ERROR_TEXT,
        "tooltip": message,
        "class": WIDGET_ERROR_CLASS,
        "percentage": 0,
    }


def _window_lines(window: UsageWindow, now: datetime | None) -> list[str]:
    lines = [
        f"  {window.label}:",
        f"    Usage:    {render_progress_bar(window.utilization)}  {window.utilization:.1f}%",
    ]
    remaining = window.time_until_reset(now)
    if remaining is not None:
        lines.append(f"    Resets:   in {format_duration(remaining)}")
    else:
        lines.append("    Resets:   N/A")
    return lines


def _extra_usage_lines(extra: Any) -> list[str]:
    if not isinstance(extra, dict):
        return []
    lines = ["Extra Usage Credits:"]
    utilization = extra.get("utilization")
    if isinstance(utilization, int | float):
        lines.append(f"  Usage:    {render_progress_bar(utilization)}  {utilization:.1f}%")
    used = extra.get("used_credits")
    limit = extra.get("monthly_limit")
    if isinstance(used, int | float) and isinstance(limit, int | float):
        lines.append(f"  Credits:  ${used:.2f} / ${limit:.2f}")
    return lines


def _subscription_lines(sub: Any, now: datetime) -> list[str]:
    if not isinstance(sub, dict):
        return []
    lines = [click.style("Subscription:", fg="cyan", bold=True)]

    plan = sub.get("plan")
    if isinstance(plan, dict):
        status = str(plan.get("status", ""))
        styled = status
        if status in STATUS_COLORS:
            styled = click.style(status, fg=STATUS_COLORS[status])
        level = click.style(f"({plan.get('level', '')})", dim=True)
        lines.append(f"  Plan:     {plan.get('title', '')} {level} {styled}")
    elif sub.get("status"):
        lines.append(f"  Status:   {sub['status']}")

    expires_at = sub.get("expires_at")
    if isinstance(expires_at, str) and expires_at:
        try:
            expiry = parse_timestamp(expires_at)
        except ValueError:
            expiry = None
        if expiry is not None:
            day = expiry.strftime("%Y-%m-%d")
            left = expiry - now
            if left > timedelta(0):
                text = f"{day} {click.style(f'({format_duration(left)} remaining)', dim=True)}"
            else:
                text = click.style(f"{day} (expired)", fg="red")
            lines.append(f"  Expires:  {text}")

    features = sub.get("features")
    if isinstance(features, list) and features:
        lines.append("  Features:")
        for feature in features:
            if not isinstance(feature, dict):
                continue
            left = int(feature.get("left", 0) or 0)
            total = int(feature.get("total", 0) or 0)
            consumed = (total - left) / total * 100 if total > 0 else 0.0
            name = click.style(str(feature.get("feature", "")), fg="blue")
            counts = click.style(f"{left}/{total} left", dim=True)
            lines.append(f"    {name}: {render_progress_bar(consumed)} {counts}")
    return lines


def format_pretty(stats: UsageStats, now: datetime | None = None) -> str:
    """Human-readable multi-provider report."""
    now = now or datetime.now(UTC)
    lines = ["LLM Usage Statistics", "====================", ""]

    if stats.is_empty:
        lines.extend(["No providers configured.", ""])

    for usage in stats.providers:
        name = provider_display_name(usage.provider_id)
        if usage.error:
            lines.extend([f"{name}:", f"  Error: {usage.error}", ""])
            continue

        header = f"{name}{_account_suffix(usage.extra)}:"
        lines.extend([header, "-" * len(header)])
        for window in usage.windows:
            lines.extend(_window_lines(window, now))
        if "extra_usage" in usage.extra:
            lines.extend(_extra_usage_lines(usage.extra["extra_usage"]))
        if "subscription" in usage.extra:
            lines.extend(_subscription_lines(usage.extra["subscription"], now))
        lines.append("")

    return "\n".join(lines)
