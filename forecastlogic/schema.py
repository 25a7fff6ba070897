"""
Pydantic models for the analysis object of a service reply.

Validators repair rather than reject: numbers are coerced and clamped, text
lists are bounded. Limits travel in the validation context:

    AnalysisReply.model_validate(raw, context={"limits": cfg.limits})
"""

from __future__ import annotations
from typing import Any, List

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from . import utils
from .config import LimitConfig

_SUMMARY_FIELDS = ("avg", "min", "max", "peakHour", "peak_hour")


def _limits(info: ValidationInfo) -> LimitConfig:
    ctx = info.context or {}
    return ctx.get("limits") or LimitConfig()


class SummaryReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0
    peak_hour: int = Field(0, validation_alias=AliasChoices("peakHour", "peak_hour"))

    @field_validator("avg", "min", "max", mode="before")
    @classmethod
    def _bounded(cls, v: Any, info: ValidationInfo) -> float:
        return utils.coerce_number(v, 0.0, _limits(info).summary_value_max)

    @field_validator("peak_hour", mode="before")
    @classmethod
    def _hour(cls, v: Any) -> int:
        return utils.round_half_up(utils.coerce_number(v, 0.0, 23.0))

    @model_validator(mode="after")
    def _ordered(self) -> SummaryReply:
        # min is lowered first, then max raised
        if self.min > self.avg:
            self.min = self.avg
        if self.avg > self.max:
            self.max = self.avg
        return self


class AnalysisReply(BaseModel):
    """Drivers, recommendations and summary numbers as the service sent them."""

    model_config = ConfigDict(extra="ignore")

    summary: SummaryReply = Field(default_factory=SummaryReply)
    drivers: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _locate_summary(cls, data: Any) -> Any:
        """Summary numbers live under 'summary' or directly on the analysis object."""
        if not isinstance(data, dict):
            return {}
        if isinstance(data.get("summary"), dict):
            return data
        flat = {k: data[k] for k in _SUMMARY_FIELDS if k in data}
        return {**data, "summary": flat}

    @field_validator("drivers", "recommendations", mode="before")
    @classmethod
    def _text_items(cls, v: Any, info: ValidationInfo) -> List[str]:
        if not isinstance(v, list):
            return []
        limits = _limits(info)
        max_chars = (
            limits.driver_max_chars
            if info.field_name == "drivers"
            else limits.recommendation_max_chars
        )
        items = [str(x)[:max_chars] for x in v if x is not None]
        return items[: limits.max_list_items]
