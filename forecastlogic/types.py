from __future__ import annotations
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, TypedDict
from dataclasses import dataclass, field
from enum import Enum

import pandas as pd

GroupKey = str


# Canonical points and series
@dataclass(frozen=True)
class Point:
    timestamp: pd.Timestamp  # tz-aware UTC, minutes/seconds zeroed
    value: float  # energy per hour, >= 0


HourlySeries = Tuple[Point, ...]
MonthlySeries = Tuple[Point, ...]


@dataclass(frozen=True)
class AnalysisSummary:
    """
    Sanitized analysis accompanying a forecast.

    Invariants:
      - 0 <= min <= avg <= max
      - 0 <= peak_hour <= 23
      - drivers / recommendations bounded in count and length
    """

    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0
    peak_hour: int = 0
    drivers: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    # 48-point hourly preview for the analysis-only path
    preview: HourlySeries = ()


@dataclass(frozen=True)
class ForecastBundle:
    hourly: Mapping[GroupKey, HourlySeries]
    monthly: Mapping[GroupKey, MonthlySeries]
    analysis: AnalysisSummary

    @property
    def group_keys(self) -> List[GroupKey]:
        return list(self.hourly)


# Transient extraction / unwrapping results
@dataclass(frozen=True)
class RawExtraction:
    source_text: str
    candidate: Any = None  # dict | list | None
    strategy: Optional[str] = None  # name of the strategy that matched


class _Missing:
    """Marker for a point field absent from the source."""

    _instance: Optional["_Missing"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class RawPoint:
    timestamp: Any = MISSING
    value: Any = MISSING


RawGroups = Dict[GroupKey, List[RawPoint]]


class ContainerShape(Enum):
    MAP_OF_ARRAYS = "map_of_arrays"
    ARRAY_OF_GROUP_RECORDS = "array_of_group_records"
    FLAT_NUMBER_ARRAY = "flat_number_array"
    UNKNOWN = "unknown"


@dataclass
class UnwrappedForecast:
    hourly: Optional[RawGroups] = None
    monthly: Optional[RawGroups] = None
    analysis: Any = None
    salvaged: bool = False


# Serialized payloads
class HourlyPointPayload(TypedDict):
    time: str
    value: float


class MonthlyPointPayload(TypedDict):
    month: str
    value: float


class SummaryPayload(TypedDict):
    avg: float
    min: float
    max: float
    peakHour: int


class AnalysisPayload(TypedDict, total=False):
    summary: SummaryPayload
    drivers: List[str]
    recommendations: List[str]
    generated_forecast: List[HourlyPointPayload]


class BundlePayload(TypedDict, total=False):
    hourly_forecast_groups: Dict[str, List[HourlyPointPayload]]
    monthly_forecast_groups: Dict[str, List[MonthlyPointPayload]]
    analysis: AnalysisPayload
    generated: List[HourlyPointPayload]


# Caller context
@dataclass(frozen=True)
class TrainingAggregates:
    avg: float
    min: float
    max: float
    count: int
    peak_hour: int
    hourly_avg: Tuple[float, ...] = field(default_factory=tuple)


InsightStyle = Literal["structured", "direct"]
SeriesKind = Literal["hourly", "monthly"]
