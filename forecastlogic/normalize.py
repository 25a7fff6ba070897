from __future__ import annotations
import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from . import synthetic, timestamps, utils
from .config import NormalizerConfig, default_config
from .types import GroupKey, HourlySeries, MonthlySeries, Point, RawPoint

logger = logging.getLogger(__name__)


def _normalize_group(
    raw: Optional[Sequence[RawPoint]],
    periods: int,
    slot: Callable[[int], pd.Timestamp],
    canonicalize: Callable[[object], Optional[pd.Timestamp]],
    upper: Callable[[pd.Timestamp], float],
    synthesize: Callable[[int], float],
) -> tuple[tuple[Point, ...], int]:
    """
    Build exactly `periods` points on the canonical grid.

    Source entries are used positionally; an entry counts only when its
    timestamp parses and its value is present. Everything else is synthesized.
    Returns the series and the number of synthesized points.
    """
    taken = list(raw[:periods]) if raw else []
    out: List[Point] = []
    filled = 0
    for i in range(periods):
        at = slot(i)
        hi = upper(at)
        value: Optional[float] = None
        if i < len(taken):
            entry = taken[i]
            if canonicalize(entry.timestamp) is not None:
                value = utils.coerce_point_value(entry.value, hi)
        if value is None:
            value = utils.clamp(synthesize(i), 0.0, hi)
            filled += 1
        out.append(Point(at, value))
    return tuple(out), filled


def hourly_series(
    raw: Optional[Sequence[RawPoint]],
    start: pd.Timestamp,
    group_index: int = 0,
    config: Optional[NormalizerConfig] = None,
) -> tuple[HourlySeries, int]:
    """One group's canonical hourly series and its count of synthesized points."""
    cfg = config or default_config()
    anchor = timestamps.canonicalize_hour(start)
    hi = cfg.limits.hourly_value_max
    return _normalize_group(
        raw,
        cfg.limits.hourly_points,
        slot=lambda i: timestamps.hour_at(anchor, i),
        canonicalize=timestamps.canonicalize_hour,
        upper=lambda _at: hi,
        synthesize=lambda i: synthetic.hourly_value(i, anchor, group_index, cfg.synthetic),
    )


def monthly_series(
    raw: Optional[Sequence[RawPoint]],
    start_month: pd.Timestamp,
    group_index: int = 0,
    config: Optional[NormalizerConfig] = None,
) -> tuple[MonthlySeries, int]:
    """One group's canonical monthly series and its count of synthesized points."""
    cfg = config or default_config()
    anchor = timestamps.canonicalize_month(start_month)
    factor = cfg.limits.monthly_value_factor
    return _normalize_group(
        raw,
        cfg.limits.monthly_points,
        slot=lambda i: timestamps.month_at(anchor, i),
        canonicalize=timestamps.canonicalize_month,
        upper=lambda at: factor * timestamps.hours_in_month(at),
        synthesize=lambda i: synthetic.monthly_value(i, anchor, group_index, cfg.synthetic),
    )


def normalize_hourly(
    raw_per_group: Optional[Mapping[GroupKey, Sequence[RawPoint]]],
    group_keys: Sequence[GroupKey],
    start: pd.Timestamp,
    config: Optional[NormalizerConfig] = None,
) -> Dict[GroupKey, HourlySeries]:
    """
    Canonical hourly series for every group key.

    Each series has exactly `limits.hourly_points` points at start + i hours,
    values bounded to [0, limits.hourly_value_max].
    """
    raw_per_group = raw_per_group or {}
    out: Dict[GroupKey, HourlySeries] = {}
    for gi, g in enumerate(group_keys):
        series, filled = hourly_series(raw_per_group.get(g), start, gi, config)
        if filled:
            logger.debug("Hourly group %s: %d synthesized points", g, filled)
        out[g] = series
    return out


def normalize_monthly(
    raw_per_group: Optional[Mapping[GroupKey, Sequence[RawPoint]]],
    group_keys: Sequence[GroupKey],
    start_month: pd.Timestamp,
    config: Optional[NormalizerConfig] = None,
) -> Dict[GroupKey, MonthlySeries]:
    """
    Canonical monthly series for every group key.

    Each series has exactly `limits.monthly_points` points on the first of
    consecutive UTC months; a value is bounded to
    [0, monthly_value_factor * hours in its month].
    """
    raw_per_group = raw_per_group or {}
    out: Dict[GroupKey, MonthlySeries] = {}
    for gi, g in enumerate(group_keys):
        series, filled = monthly_series(raw_per_group.get(g), start_month, gi, config)
        if filled:
            logger.debug("Monthly group %s: %d synthesized points", g, filled)
        out[g] = series
    return out
