from __future__ import annotations
from typing import Final

HOURLY_POINTS: Final[int] = 48
MONTHLY_POINTS: Final[int] = 12

INDEX_NAME: Final[str] = "t_start"
MONTH_INDEX_NAME: Final[str] = "month"

HOUR_FORMAT: Final[str] = "%Y-%m-%dT%H:00:00Z"
MONTH_FORMAT: Final[str] = "%Y-%m-01T00:00:00Z"

# Training-table headers that mark the timestamp column
TIMESTAMP_HEADER_PATTERN: Final[str] = r"measured|time|timestamp"
MAX_GROUP_KEYS: Final[int] = 160

# Used when the training table carries no group columns
DEFAULT_GROUP_KEYS: Final[tuple[str, ...]] = (
    "28",
    "29",
    "30",
    "36",
    "37",
    "38",
    "39",
    "40",
    "41",
    "42",
    "43",
)
