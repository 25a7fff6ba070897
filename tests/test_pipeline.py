"""End-to-end properties of the reply normalization pipeline."""

import json

import pandas as pd
import pytest

import forecastlogic as fl
from forecastlogic import exceptions, pipeline, synthetic, timestamps
from forecastlogic.types import TrainingAggregates

ODD_REPLIES = [
    "",
    "   ",
    "sorry, I can't do that",
    '{"hourly_forecast_groups": {"a": [{"time": "2025-01-01T00:00:00Z", "val',
    "null",
    "[]",
    "{}",
    "42",
    '{"hourly": 5, "monthly": "x", "analysis": [1]}',
    '```json\n{"hourly": {"a": [1, 2, 3]}}\n```',
    '{"hourly": {"a": [null, {}, [], "x", {"time": null, "value": null}]}}',
    '{"data": {"data": {"data": {"hourly": {}}}}}',
]


def _assert_complete(bundle, keys):
    assert list(bundle.hourly) == keys
    assert list(bundle.monthly) == keys
    for g in keys:
        assert len(bundle.hourly[g]) == 48
        assert len(bundle.monthly[g]) == 12


@pytest.mark.parametrize("reply", ODD_REPLIES)
def test_completeness_for_any_reply(reply, start):
    keys = ["a", "b", "c"]
    bundle = fl.run(reply, keys, start)
    _assert_complete(bundle, keys)
    s = bundle.analysis
    assert s.min <= s.avg <= s.max
    assert 0 <= s.peak_hour <= 23


@pytest.mark.parametrize("reply", ODD_REPLIES + [None])
def test_timestamps_are_canonical_and_consecutive(reply, start):
    bundle = fl.run(reply, ["a"], start)
    hourly = bundle.hourly["a"]
    for prev, cur in zip(hourly, hourly[1:]):
        assert cur.timestamp - prev.timestamp == pd.Timedelta(hours=1)
    assert all(p.timestamp.minute == 0 and p.timestamp.second == 0 for p in hourly)

    monthly = bundle.monthly["a"]
    assert monthly[0].timestamp == pd.Timestamp("2025-02-01T00:00:00Z")
    for prev, cur in zip(monthly, monthly[1:]):
        assert cur.timestamp == prev.timestamp + pd.DateOffset(months=1)
    assert all(p.timestamp.day == 1 and p.timestamp.hour == 0 for p in monthly)


def test_values_are_bounded(start):
    reply = json.dumps(
        {
            "hourly_forecast_groups": {
                "a": [{"time": "2025-01-01T00:00:00Z", "value": v} for v in (-1, 1e6, "7", 49.9)]
            },
            "monthly_forecast_groups": {
                "a": [{"month": "2025-02-01T00:00:00Z", "value": v} for v in (1e12, -5)]
            },
        }
    )
    bundle = fl.run(reply, ["a", "b"], start)
    for g in ("a", "b"):
        assert all(0 <= p.value <= 50 for p in bundle.hourly[g])
        assert all(
            0 <= p.value <= 24 * timestamps.hours_in_month(p.timestamp)
            for p in bundle.monthly[g]
        )
    assert [p.value for p in bundle.hourly["a"][:4]] == [0.0, 50.0, 7.0, 49.9]


def test_synthesis_is_deterministic(start):
    keys = ["28", "29", "30"]
    assert fl.run(None, keys, start) == fl.run(None, keys, start)
    assert fl.run(None, keys, "2025-01-01T00:00:00Z") == fl.run(None, keys, start)


def test_synthetic_path_matches_generator(start, start_month):
    bundle = fl.run(None, ["x", "y"], start)
    assert bundle.hourly["y"][7].value == synthetic.hourly_value(7, start, 1)
    assert bundle.monthly["x"][3].value == synthetic.monthly_value(3, start_month, 0)
    assert bundle.analysis.avg == 0.0 and bundle.analysis.drivers == ()


def test_partial_preservation(start):
    reply = '{"hourly_forecast_groups": {"a": [{"time":"2025-01-01T00:00:00Z","value":3}]}}'
    bundle = fl.run(reply, ["a", "b"], start)

    a = bundle.hourly["a"]
    assert a[0].value == 3
    assert timestamps.format_hour(a[0].timestamp) == "2025-01-01T00:00:00Z"
    assert [p.value for p in a[1:]] == [
        synthetic.hourly_value(i, start, 0) for i in range(1, 48)
    ]
    synthetic_only = fl.run(None, ["a", "b"], start)
    assert bundle.hourly["b"] == synthetic_only.hourly["b"]
    # no monthly container: entirely synthetic
    assert bundle.monthly == synthetic_only.monthly


def test_alias_equivalence(start, hourly_points):
    bundles = [
        fl.run(json.dumps({key: {"a": hourly_points}}), ["a", "b"], start)
        for key in ("hourly_forecast_groups", "hourlyForecastGroups", "hourlyGroups")
    ]
    assert bundles[0] == bundles[1] == bundles[2]


def test_salvage_bare_array(start):
    reply = json.dumps(
        [
            {"time": "2025-01-01T00:00:00Z", "value": 1},
            {"time": "2025-01-01T01:00:00Z", "value": 2},
        ]
    )
    keys = ["a", "b", "c"]
    bundle = fl.run(reply, keys, start)
    for g in keys:
        assert [p.value for p in bundle.hourly[g][:2]] == [1.0, 2.0]
        assert len(bundle.hourly[g]) == 48


def test_legacy_series_is_not_shadowed_by_analysis_preview(start):
    reply = json.dumps(
        {
            "analysis": {"generated_forecast": [{"time": "2025-01-01T00:00:00Z", "value": 9}]},
            "generated": [{"time": "2025-01-01T00:00:00Z", "value": 1}],
        }
    )
    bundle = fl.run(reply, ["a"], start)
    assert bundle.hourly["a"][0].value == 1.0
    assert bundle.analysis.preview[0].value == 9.0


def test_full_reply(full_reply, start):
    bundle = fl.run(full_reply, ["a", "b"], start)
    assert [p.value for p in bundle.hourly["a"][:3]] == [3.0, 4.5, 1.0]
    assert bundle.hourly["b"][0].value == 3.0
    assert bundle.monthly["a"][0].value == 1500.0
    assert bundle.monthly["b"][0].value == synthetic.monthly_value(
        0, pd.Timestamp("2025-02-01T00:00:00Z"), 1
    )
    assert bundle.analysis.peak_hour == 19
    assert bundle.analysis.drivers == ("temperature",)


def test_reply_inside_generate_content_envelope(full_reply, start):
    envelope = json.dumps(
        {"candidates": [{"content": {"parts": [{"text": f"```json\n{full_reply}\n```"}]}}]}
    )
    assert fl.run(envelope, ["a", "b"], start) == fl.run(full_reply, ["a", "b"], start)


def test_empty_group_keys_are_rejected(start):
    with pytest.raises(exceptions.PipelineInputError):
        fl.run("{}", [], start)


def test_group_keys_are_deduplicated_in_order(start):
    bundle = fl.run(None, ["b", "a", "b", 7], start)
    assert list(bundle.hourly) == ["b", "a", "7"]


def test_aggregates_feed_the_synthetic_analysis(start):
    aggs = TrainingAggregates(avg=2.3456, min=1.0, max=4.0, count=10, peak_hour=18)
    bundle = fl.run(None, ["a"], start, aggregates=aggs)
    assert bundle.analysis.avg == 2.35
    assert bundle.analysis.peak_hour == 18
    assert len(bundle.analysis.drivers) == 3
    # aggregates only matter when there is no reply
    assert fl.run("{}", ["a"], start, aggregates=aggs).analysis.avg == 0.0


def test_failing_stage_degrades_instead_of_raising(monkeypatch, full_reply, start):
    def boom(*args, **kwargs):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(pipeline.unwrap, "unwrap", boom)
    bundle = fl.run(full_reply, ["a", "b"], start)
    assert bundle == fl.run(None, ["a", "b"], start)


def test_start_defaults_to_current_hour():
    before = pd.Timestamp.now(tz="UTC").floor("h")
    bundle = fl.run(None, ["a"])
    first = bundle.hourly["a"][0].timestamp
    assert first >= before
    assert first.minute == 0
