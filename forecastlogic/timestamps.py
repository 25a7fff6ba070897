from __future__ import annotations
import logging
import re
from datetime import datetime
from typing import Any, Optional

import pandas as pd

from . import canon, exceptions
from .utils import is_number

logger = logging.getLogger(__name__)

# A recognizable date must carry a full year; otherwise the parser fills
# missing fields from today's date.
_YEAR = re.compile(r"\d{4}")


def _parse(value: Any) -> Optional[pd.Timestamp]:
    if isinstance(value, pd.Timestamp) or isinstance(value, datetime):
        ts = pd.Timestamp(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s or not _YEAR.search(s):
            return None
        try:
            ts = pd.to_datetime(s, utc=True, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    else:
        return None

    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    else:
        ts = ts.tz_convert("UTC")
    return ts


def canonicalize_hour(value: Any) -> Optional[pd.Timestamp]:
    """Parse a date-like value and truncate it to the UTC hour; None if unparseable."""
    ts = _parse(value)
    if ts is None:
        return None
    return ts.replace(minute=0, second=0, microsecond=0, nanosecond=0)


def canonicalize_month(value: Any) -> Optional[pd.Timestamp]:
    """Parse a date-like value and truncate it to 00:00 on the first of its UTC month."""
    ts = canonicalize_hour(value)
    if ts is None:
        return None
    return ts.replace(day=1, hour=0)


def first_of_next_month(ts: pd.Timestamp) -> pd.Timestamp:
    month = canonicalize_month(ts)
    exceptions.require(
        month is not None, f"Not a valid instant: {ts!r}", exceptions.TimestampError
    )
    return month + pd.DateOffset(months=1)


def hours_in_month(ts: pd.Timestamp) -> int:
    return int(ts.days_in_month) * 24


def hour_at(start: pd.Timestamp, offset: int) -> pd.Timestamp:
    return start + pd.Timedelta(hours=offset)


def month_at(start_month: pd.Timestamp, offset: int) -> pd.Timestamp:
    return start_month + pd.DateOffset(months=offset)


def parse_start(value: Any = None) -> pd.Timestamp:
    """
    Resolve the caller-supplied reference instant.

    Accepts ISO text, epoch milliseconds (number or numeric string),
    datetimes and None. Anything unusable falls back to the current time.
    """
    if value is None:
        return pd.Timestamp.now(tz="UTC")

    ms: Optional[float] = None
    if is_number(value):
        ms = float(value)
    elif isinstance(value, str):
        try:
            ms = float(value.strip())
        except ValueError:
            ms = None
    if ms is not None:
        if ms > 0:
            try:
                return pd.Timestamp(int(ms), unit="ms", tz="UTC")
            except (ValueError, OverflowError, pd.errors.OutOfBoundsDatetime):
                pass
        logger.debug("Unusable epoch start %r; using now", value)
        return pd.Timestamp.now(tz="UTC")

    ts = _parse(value)
    if ts is None:
        logger.debug("Unparseable start %r; using now", value)
        return pd.Timestamp.now(tz="UTC")
    return ts


def format_hour(ts: pd.Timestamp) -> str:
    return ts.strftime(canon.HOUR_FORMAT)


def format_month(ts: pd.Timestamp) -> str:
    return ts.strftime(canon.MONTH_FORMAT)
