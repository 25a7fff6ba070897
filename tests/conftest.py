import json

import pandas as pd
import pytest

from forecastlogic import config


@pytest.fixture
def start():
    return pd.Timestamp("2025-01-01T00:00:00Z")


@pytest.fixture
def start_month():
    return pd.Timestamp("2025-02-01T00:00:00Z")


@pytest.fixture
def group_keys():
    return ["a", "b"]


@pytest.fixture
def cfg():
    return config.default_config()


@pytest.fixture
def hourly_points():
    # 3 valid hourly points from the start fixture onward
    return [
        {"time": "2025-01-01T00:00:00Z", "value": 3},
        {"time": "2025-01-01T01:00:00Z", "value": 4.5},
        {"time": "2025-01-01T02:00:00Z", "value": 1},
    ]


@pytest.fixture
def full_reply(hourly_points):
    """Well-formed reply following the requested contract."""
    return json.dumps(
        {
            "hourly_forecast_groups": {"a": hourly_points, "b": hourly_points[:1]},
            "monthly_forecast_groups": {
                "a": [{"month": "2025-02-01T00:00:00Z", "value": 1500}],
            },
            "analysis": {
                "drivers": ["temperature"],
                "recommendations": ["shift evening loads"],
                "summary": {"avg": 2.2, "min": 1.1, "max": 4.1, "peakHour": 19},
            },
        }
    )
