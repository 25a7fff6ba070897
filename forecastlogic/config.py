from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from . import canon


@dataclass
class AliasConfig:
    # Envelope keys wrapping the actual forecast (one level only)
    wrapper_keys: Tuple[str, ...] = ("data", "result", "output", "response")

    # Container aliases, tried in order
    hourly_keys: Tuple[str, ...] = (
        "hourly_forecast_groups",
        "hourlyForecastGroups",
        "hourly_forecast",
        "hourlyForecast",
        "hourly_groups",
        "hourlyGroups",
        "hourly",
        "forecast_hourly",
        "forecastHourly",
    )
    monthly_keys: Tuple[str, ...] = (
        "monthly_forecast_groups",
        "monthlyForecastGroups",
        "monthly_forecast",
        "monthlyForecast",
        "monthly_groups",
        "monthlyGroups",
        "monthly",
        "forecast_monthly",
        "forecastMonthly",
    )
    analysis_keys: Tuple[str, ...] = (
        "analysis",
        "analysis_result",
        "analysisResult",
        "summary",
    )
    # Older single-series contract
    legacy_series_keys: Tuple[str, ...] = ("generated",)

    # [{group, data}, ...] records
    record_id_keys: Tuple[str, ...] = ("group", "key", "id")
    record_data_keys: Tuple[str, ...] = (
        "data",
        "values",
        "hourly",
        "monthly",
        "forecast",
    )

    # Point fields
    hourly_time_keys: Tuple[str, ...] = ("time", "timestamp", "datetime", "t_start")
    monthly_time_keys: Tuple[str, ...] = ("month", "time", "timestamp", "date")
    value_keys: Tuple[str, ...] = ("value", "val")

    # Salvage scan: [{time|timestamp, value|val}, ...]
    salvage_time_keys: Tuple[str, ...] = ("time", "timestamp")
    salvage_value_keys: Tuple[str, ...] = ("value", "val")

    # Analysis preview series
    preview_keys: Tuple[str, ...] = ("generated_forecast", "forecast")

    def forecast_keys(self) -> Tuple[str, ...]:
        """Every key that marks an object as forecast-shaped."""
        return (
            self.hourly_keys
            + self.monthly_keys
            + self.analysis_keys
            + self.legacy_series_keys
        )


@dataclass
class LimitConfig:
    hourly_points: int = canon.HOURLY_POINTS
    monthly_points: int = canon.MONTHLY_POINTS

    hourly_value_max: float = 50.0
    # Monthly ceiling is this factor times the hours in the target month
    monthly_value_factor: float = 24.0

    summary_value_max: float = 100000.0
    max_list_items: int = 8
    driver_max_chars: int = 80
    recommendation_max_chars: int = 120

    # Salvage search bounds
    salvage_max_depth: int = 6
    salvage_max_nodes: int = 10000


@dataclass
class SyntheticConfig:
    base: float = 2.0
    diurnal_amplitude: float = 1.0
    seasonal_amplitude: float = 0.3
    group_step: float = 0.02


@dataclass
class NormalizerConfig:
    aliases: AliasConfig = field(default_factory=AliasConfig)
    limits: LimitConfig = field(default_factory=LimitConfig)
    synthetic: SyntheticConfig = field(default_factory=SyntheticConfig)


def default_config() -> NormalizerConfig:
    return NormalizerConfig()
