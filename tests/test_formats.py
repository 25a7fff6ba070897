"""Tests for bundle serialization and derived views."""

import json

import pandas as pd
import pytest

import forecastlogic as fl
from forecastlogic import canon, formats
from forecastlogic.types import AnalysisSummary


@pytest.fixture
def bundle(full_reply, start):
    return fl.run(full_reply, ["a", "b"], start)


def test_payload_shape(bundle):
    payload = formats.to_payload(bundle)
    assert set(payload) == {"hourly_forecast_groups", "monthly_forecast_groups", "analysis"}
    hourly = payload["hourly_forecast_groups"]["a"]
    assert len(hourly) == 48
    assert hourly[0] == {"time": "2025-01-01T00:00:00Z", "value": 3.0}
    assert hourly[47]["time"] == "2025-01-02T23:00:00Z"
    monthly = payload["monthly_forecast_groups"]["a"]
    assert len(monthly) == 12
    assert monthly[0] == {"month": "2025-02-01T00:00:00Z", "value": 1500.0}
    assert monthly[11]["month"] == "2026-01-01T00:00:00Z"
    assert payload["analysis"] == {
        "summary": {"avg": 2.2, "min": 1.1, "max": 4.1, "peakHour": 19},
        "drivers": ["temperature"],
        "recommendations": ["shift evening loads"],
    }
    # serializable as-is
    json.dumps(payload)


def test_payload_optional_sections(bundle):
    payload = formats.to_payload(bundle, include_consensus=True, include_preview=True)
    assert len(payload["generated"]) == 48
    assert len(payload["analysis"]["generated_forecast"]) == 48


def test_consensus_is_mean_across_groups(start):
    bundle = fl.run(None, ["a", "b"], start)
    series = formats.consensus(bundle)
    assert len(series) == 48
    # hour 0: 2.0 and 2.02
    assert series[0].value == pytest.approx(2.01)
    assert series[0].timestamp == start


def test_to_frame(bundle):
    hourly = formats.to_frame(bundle, "hourly")
    assert hourly.shape == (48, 2)
    assert hourly.index.name == canon.INDEX_NAME
    assert list(hourly.columns) == ["a", "b"]
    assert hourly.loc[pd.Timestamp("2025-01-01T01:00:00Z"), "a"] == 4.5

    monthly = formats.to_frame(bundle, "monthly")
    assert monthly.shape == (12, 2)
    assert monthly.index.name == canon.MONTH_INDEX_NAME
    assert monthly.index.is_monotonic_increasing


def test_insight_text_structured(bundle):
    text = formats.insight_text(bundle.analysis)
    lines = text.splitlines()
    assert lines[0] == "Energy training data insight:"
    assert "Peak hour tendency: 19:00 UTC." in text
    assert "  - shift evening loads" in lines
    assert lines[-1].startswith("• 48h forecast (first 6 values FWh):")


def test_insight_text_direct():
    summary = AnalysisSummary(
        avg=2.0, min=1.0, max=3.0, peak_hour=18, drivers=("a", "b", "c", "d"), recommendations=("x", "y")
    )
    text = formats.insight_text(summary, "direct")
    assert text.splitlines()[0] == "Direct insight:"
    assert "Key drivers: a, b, c." in text
    assert text.endswith("Priority action: x")
