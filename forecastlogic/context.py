"""
Helpers for the calling layer: derive pipeline inputs from an already
parsed training table. Nothing here reads shared state.
"""

from __future__ import annotations
import re
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from . import canon, exceptions
from .types import GroupKey, TrainingAggregates

LOCAL_DRIVERS = ["daily pattern", "temperature", "EV uptake (if any)"]
LOCAL_RECOMMENDATIONS = [
    "Shift flexible loads to low-price hours",
    "Investigate peak-hour demand reduction",
]


def timestamp_column(frame: pd.DataFrame) -> Any:
    """First header that names a timestamp, else the first column."""
    exceptions.require(
        len(frame.columns) > 0, "Training table has no columns.", exceptions.ContextError
    )
    pattern = re.compile(canon.TIMESTAMP_HEADER_PATTERN, re.IGNORECASE)
    return next(
        (c for c in frame.columns if pattern.search(str(c))), frame.columns[0]
    )


def group_keys_from_frame(
    frame: pd.DataFrame, max_keys: int = canon.MAX_GROUP_KEYS
) -> List[GroupKey]:
    """
    Group identifiers of a wide consumption table: every header except the
    timestamp column, capped at `max_keys`. Falls back to the default keys
    when the table has no group columns.
    """
    if frame is None or len(frame.columns) == 0:
        return list(canon.DEFAULT_GROUP_KEYS)
    ts_col = timestamp_column(frame)
    keys = [str(c) for c in frame.columns if c != ts_col][:max_keys]
    return keys or list(canon.DEFAULT_GROUP_KEYS)


def training_aggregates(frame: pd.DataFrame) -> TrainingAggregates:
    """
    Aggregate statistics of a consumption table.

    Each row's total is the sum of its group columns (non-numeric -> 0).
    hourly_avg holds the mean row total per UTC hour of the timestamp column;
    peak_hour is its argmax.
    """
    exceptions.require(
        frame is not None and len(frame) > 0,
        "Training table is empty.",
        exceptions.ContextError,
    )
    ts_col = timestamp_column(frame)
    groups = frame.drop(columns=[ts_col])
    totals = (
        groups.apply(pd.to_numeric, errors="coerce").fillna(0.0).sum(axis=1)
        if len(groups.columns)
        else pd.Series(0.0, index=frame.index)
    )

    t = pd.to_datetime(frame[ts_col], utc=True, errors="coerce")
    by_hour = (
        pd.DataFrame({"hour": t.dt.hour, "total": totals})
        .dropna(subset=["hour"])
        .astype({"hour": int})
        .groupby("hour")["total"]
        .mean()
        .reindex(range(24), fill_value=0.0)
    )
    hourly_avg = by_hour.to_numpy(dtype=float)

    return TrainingAggregates(
        avg=float(totals.mean()),
        min=float(totals.min()),
        max=float(totals.max()),
        count=int(len(totals)),
        peak_hour=int(np.argmax(hourly_avg)),
        hourly_avg=tuple(float(v) for v in hourly_avg),
    )


def local_analysis(aggregates: TrainingAggregates) -> Dict[str, Any]:
    """Heuristic analysis object used when no generative service is configured."""
    return {
        "summary": {
            "avg": round(aggregates.avg, 2),
            "min": round(aggregates.min, 2),
            "max": round(aggregates.max, 2),
            "peakHour": aggregates.peak_hour,
        },
        "drivers": list(LOCAL_DRIVERS),
        "recommendations": list(LOCAL_RECOMMENDATIONS),
    }
