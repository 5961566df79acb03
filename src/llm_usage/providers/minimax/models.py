"""Response schemas of the MiniMax coding-plan API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from llm_usage.providers.base import drop_null_fields


class MiniMaxModel(BaseModel):
    """A null member reads as unset, so counts default to 0 and names to empty."""

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        return drop_null_fields(data)


class BaseResp(MiniMaxModel):
    status_code: int = 0
    status_msg: str = ""


class ModelRemain(MiniMaxModel):
    """Quota for one model in the current interval. Times are epoch milliseconds."""

    start_time: int = 0
    end_time: int = 0
    remains_time: int = 0
    current_interval_total_count: int = 0
    current_interval_usage_count: int = 0
    model_name: str = ""


class CodingPlanResponse(MiniMaxModel):
    """Body of ``coding_plan/remains``."""

    model_remains: list[ModelRemain] = Field(default_factory=list)
    base_resp: BaseResp = Field(default_factory=BaseResp)


class MiniMaxSubscriptionResponse(MiniMaxModel):
    """Body of the resource package lookup; only the status is modelled."""

    base_resp: BaseResp = Field(default_factory=BaseResp)
