"""Request/response schemas of the Kimi billing and subscription APIs."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from llm_usage.providers.base import drop_null_fields


class KimiModel(BaseModel):
    """Kimi uses camelCase JSON field names; a null member reads as unset."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        return drop_null_fields(data)


class UsageDetail(KimiModel):
    """Limit/used pair; the API sends the amounts as decimal strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    limit: str = ""
    used: str = ""
    reset_time: str = ""


class RateWindow(KimiModel):
    """Rate-limit window size, e.g. ``5`` + ``TIME_UNIT_MINUTE``."""

    duration: int = 0
    time_unit: str = ""


class LimitItem(KimiModel):
    """A nested rate limit under a usage scope."""

    window: RateWindow = Field(default_factory=RateWindow)
    detail: UsageDetail = Field(default_factory=UsageDetail)


class UsageItem(KimiModel):
    """Usage for one scope plus its rate limits."""

    scope: str = ""
    detail: UsageDetail = Field(default_factory=UsageDetail)
    limits: list[LimitItem] = Field(default_factory=list)


class KimiUsageResponse(KimiModel):
    """Body of ``BillingService/GetUsages``."""

    usages: list[UsageItem] = Field(default_factory=list)


class Goods(KimiModel):
    title: str = ""
    membership_level: str = ""


class Subscription(KimiModel):
    subscription_id: str = ""
    current_end_time: str = ""
    status: str = ""
    goods: Goods = Field(default_factory=Goods)


class Membership(KimiModel):
    feature: str = ""
    left_count: int = 0
    total_count: int = 0


class KimiSubscriptionResponse(KimiModel):
    """Body of ``SubscriptionService/GetSubscription``."""

    subscribed: bool = False
    subscription: Subscription | None = None
    memberships: list[Membership] = Field(default_factory=list)
