from __future__ import annotations

from typing import Dict, List

import pandas as pd

from . import canon, timestamps
from .types import (
    AnalysisPayload,
    AnalysisSummary,
    BundlePayload,
    ForecastBundle,
    HourlyPointPayload,
    HourlySeries,
    InsightStyle,
    MonthlyPointPayload,
    Point,
    SeriesKind,
)


def _hourly_points(series: HourlySeries) -> List[HourlyPointPayload]:
    return [{"time": timestamps.format_hour(p.timestamp), "value": p.value} for p in series]


def analysis_payload(
    analysis: AnalysisSummary, include_preview: bool = False
) -> AnalysisPayload:
    out: AnalysisPayload = {
        "summary": {
            "avg": analysis.avg,
            "min": analysis.min,
            "max": analysis.max,
            "peakHour": analysis.peak_hour,
        },
        "drivers": list(analysis.drivers),
        "recommendations": list(analysis.recommendations),
    }
    if include_preview:
        out["generated_forecast"] = _hourly_points(analysis.preview)
    return out


def to_payload(
    bundle: ForecastBundle,
    *,
    include_consensus: bool = False,
    include_preview: bool = False,
) -> BundlePayload:
    """
    JSON-ready representation of a bundle:

        {
          "hourly_forecast_groups": {group: [{"time", "value"}, ...]},
          "monthly_forecast_groups": {group: [{"month", "value"}, ...]},
          "analysis": {"summary": {...}, "drivers": [...], "recommendations": [...]},
        }

    `include_consensus` adds "generated" (mean across groups per hour);
    `include_preview` adds the analysis "generated_forecast" series.
    """
    monthly: Dict[str, List[MonthlyPointPayload]] = {
        g: [
            {"month": timestamps.format_month(p.timestamp), "value": p.value}
            for p in series
        ]
        for g, series in bundle.monthly.items()
    }
    out: BundlePayload = {
        "hourly_forecast_groups": {
            g: _hourly_points(s) for g, s in bundle.hourly.items()
        },
        "monthly_forecast_groups": monthly,
        "analysis": analysis_payload(bundle.analysis, include_preview),
    }
    if include_consensus:
        out["generated"] = _hourly_points(consensus(bundle))
    return out


def to_frame(bundle: ForecastBundle, kind: SeriesKind = "hourly") -> pd.DataFrame:
    """
    Wide table for charting: one row per timestamp, one column per group.

    Index is named 't_start' (hourly) or 'month' (monthly), tz-aware UTC.
    """
    source = bundle.hourly if kind == "hourly" else bundle.monthly
    name = canon.INDEX_NAME if kind == "hourly" else canon.MONTH_INDEX_NAME
    cols = {
        g: pd.Series(
            [p.value for p in series],
            index=pd.DatetimeIndex([p.timestamp for p in series]),
            dtype=float,
        )
        for g, series in source.items()
    }
    out = pd.DataFrame(cols)
    out.index.name = name
    return out.sort_index()


def consensus(bundle: ForecastBundle) -> HourlySeries:
    """Per-hour mean across all groups, rounded to 3 decimals."""
    frame = to_frame(bundle, "hourly")
    if frame.empty:
        return ()
    mean = frame.mean(axis=1).round(3)
    return tuple(Point(ts, float(v)) for ts, v in mean.items())


def insight_text(analysis: AnalysisSummary, style: InsightStyle = "structured") -> str:
    """Short prose rendering of a sanitized analysis."""
    lines: List[str] = []
    if style == "direct":
        lines.append("Direct insight:")
        lines.append(
            f"• Baseline hourly load ~{analysis.avg} FWh (range {analysis.min} to {analysis.max})."
        )
        lines.append(f"• Peak hour around {analysis.peak_hour}:00 UTC.")
        if analysis.drivers:
            lines.append(f"• Key drivers: {', '.join(analysis.drivers[:3])}.")
        if analysis.recommendations:
            lines.append(f"• Priority action: {analysis.recommendations[0]}")
        return "\n".join(lines)

    lines.append("Energy training data insight:")
    lines.append(
        f"• Baseline hourly load ~{analysis.avg} FWh (range {analysis.min} to {analysis.max})."
    )
    lines.append(f"• Peak hour tendency: {analysis.peak_hour}:00 UTC.")
    if analysis.drivers:
        lines.append(f"• Key drivers: {', '.join(analysis.drivers)}.")
    if analysis.recommendations:
        lines.append("• Recommendations:")
        lines.extend(f"  - {r}" for r in analysis.recommendations)
    if analysis.preview:
        snippet = ", ".join(f"{round(p.value, 3)}" for p in analysis.preview[:6])
        lines.append(f"• 48h forecast (first 6 values FWh): {snippet}")
    return "\n".join(lines)
