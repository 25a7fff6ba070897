# forecastlogic/utils.py
from __future__ import annotations
import math
from numbers import Real
from typing import Any, Iterable, Mapping, Optional

import numpy as np

from .types import MISSING


def is_number(v: Any) -> bool:
    """Plain numeric value (bool excluded)."""
    return isinstance(v, (Real, np.number)) and not isinstance(v, (bool, np.bool_))


def to_float(v: Any) -> Optional[float]:
    """
    Coerce a JSON-ish scalar to float.

    Numbers and numeric strings convert; anything else returns None.
    NaN is reported as None so callers treat it like garbage input.
    """
    if is_number(v):
        out = float(v)
    elif isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        try:
            out = float(s)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(out):
        return None
    return out


def clamp(v: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, v))


def coerce_point_value(v: Any, upper: float) -> Optional[float]:
    """
    Value of one source point, bounded to [0, upper].

    Returns None when the value is absent (the point must be synthesized);
    non-numeric or negative values count as 0.
    """
    if v is MISSING or v is None:
        return None
    out = to_float(v)
    if out is None or out < 0:
        out = 0.0
    return clamp(out, 0.0, upper)


def coerce_number(v: Any, lo: float, hi: float, fallback: float = 0.0) -> float:
    out = to_float(v)
    if out is None:
        out = fallback
    return clamp(out, lo, hi)


def first_present(obj: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """Value under the first key present with a non-null value, else MISSING."""
    for k in keys:
        if k in obj and obj[k] is not None:
            return obj[k]
    return MISSING


def round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))
