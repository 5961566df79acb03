"""Response schema of the Z.AI quota monitor endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ZaiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class QuotaLimit(ZaiModel):
    """One quota bucket. ``usage`` is the bucket size, ``current_value`` the amount used."""

    type: str = ""
    usage: float | None = None
    current_value: float | None = None
    remaining: float | None = None
    percentage: float | None = None
    next_reset_time: int | None = None  # Unix milliseconds


class QuotaData(ZaiModel):
    limits: list[QuotaLimit] = Field(default_factory=list)


class ZaiQuotaResponse(ZaiModel):
    """Envelope of ``GET /api/monitor/usage/quota/limit``."""

    code: int | None = None
    msg: str = ""
    success: bool = True
    data: QuotaData = Field(default_factory=QuotaData)
