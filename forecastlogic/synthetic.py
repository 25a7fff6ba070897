from __future__ import annotations
import math
from typing import Optional

import pandas as pd

from . import timestamps
from .config import SyntheticConfig

_DEFAULT = SyntheticConfig()


def group_offset(group_index: int, cfg: SyntheticConfig = _DEFAULT) -> float:
    """Small monotonic offset that separates otherwise identical synthetic groups."""
    return cfg.group_step * group_index


def hourly_value(
    hour_offset: int,
    start: pd.Timestamp,
    group_index: int,
    cfg: Optional[SyntheticConfig] = None,
) -> float:
    """
    Diurnal per-hour energy: base + amplitude * sin(2π * hour_of_day / 24).

    hour_of_day is the UTC hour of start + hour_offset hours.
    """
    cfg = cfg or _DEFAULT
    hour = timestamps.hour_at(start, hour_offset).hour
    diurnal = math.sin(2.0 * math.pi * hour / 24.0)
    return max(0.0, cfg.base + cfg.diurnal_amplitude * diurnal + group_offset(group_index, cfg))


def monthly_value(
    month_offset: int,
    start_month: pd.Timestamp,
    group_index: int,
    cfg: Optional[SyntheticConfig] = None,
) -> float:
    """
    Monthly energy: hours in the UTC month times a mildly seasonal hourly rate.
    """
    cfg = cfg or _DEFAULT
    month = timestamps.month_at(start_month, month_offset)
    month_index = month.month - 1
    seasonal = math.cos(2.0 * math.pi * month_index / 12.0)
    per_hour = max(
        0.0, cfg.base + cfg.seasonal_amplitude * seasonal + group_offset(group_index, cfg)
    )
    return timestamps.hours_in_month(month) * per_hour
