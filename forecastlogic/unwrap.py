"""Find forecast containers in a parsed reply of unknown shape."""

from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from . import timestamps
from .config import AliasConfig, LimitConfig, NormalizerConfig, default_config
from .types import (
    MISSING,
    ContainerShape,
    GroupKey,
    RawGroups,
    RawPoint,
    UnwrappedForecast,
)
from .utils import first_present, is_number

logger = logging.getLogger(__name__)

# index -> synthesized timestamp for positional (number-only) entries
SlotFn = Callable[[int], pd.Timestamp]


def unwrap_envelope(candidate: Any, aliases: AliasConfig) -> Any:
    """
    Replace a wrapper object by its inner forecast object (one level only).

    The outer analysis is kept when the inner object has none.
    """
    if not isinstance(candidate, dict):
        return candidate
    forecast_keys = aliases.forecast_keys()
    for k in aliases.wrapper_keys:
        inner = candidate.get(k)
        if not isinstance(inner, dict):
            continue
        if not any(x in inner for x in forecast_keys):
            continue
        out = dict(inner)
        outer_analysis = first_present(candidate, aliases.analysis_keys)
        if outer_analysis is not MISSING and first_present(out, aliases.analysis_keys) is MISSING:
            out[aliases.analysis_keys[0]] = outer_analysis
        logger.debug("Unwrapped forecast from '%s' wrapper", k)
        return out
    return candidate


def classify(container: Any, aliases: AliasConfig) -> ContainerShape:
    if isinstance(container, dict):
        return ContainerShape.MAP_OF_ARRAYS
    if isinstance(container, list) and container:
        if all(is_number(v) for v in container):
            return ContainerShape.FLAT_NUMBER_ARRAY
        if all(isinstance(v, dict) for v in container if v is not None) and any(
            isinstance(v, dict) and first_present(v, aliases.record_id_keys) is not MISSING
            for v in container
        ):
            return ContainerShape.ARRAY_OF_GROUP_RECORDS
    return ContainerShape.UNKNOWN


def to_points(
    entries: Any, time_keys: Sequence[str], aliases: AliasConfig, slot: SlotFn
) -> List[RawPoint]:
    """
    Per-group payload -> list of RawPoint.

    Accepts a list of point objects, a flat list of numbers (timestamps are
    synthesized from the position), or an object holding such a list under
    a record data key.
    """
    if isinstance(entries, dict):
        entries = first_present(entries, aliases.record_data_keys)
    if not isinstance(entries, list):
        return []

    points: List[RawPoint] = []
    for i, e in enumerate(entries):
        if is_number(e):
            points.append(RawPoint(slot(i), e))
        elif isinstance(e, dict):
            points.append(
                RawPoint(first_present(e, time_keys), first_present(e, aliases.value_keys))
            )
        else:
            points.append(RawPoint())
    return points


def _groups_from_map(
    container: Mapping[str, Any],
    group_keys: Sequence[GroupKey],
    time_keys: Sequence[str],
    aliases: AliasConfig,
    slot: SlotFn,
) -> RawGroups:
    out: RawGroups = {}
    for g in group_keys:
        if g in container:
            out[g] = to_points(container[g], time_keys, aliases, slot)
    return out


def _records_to_map(container: List[Any], aliases: AliasConfig) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for rec in container:
        if not isinstance(rec, dict):
            continue
        gk = first_present(rec, aliases.record_id_keys)
        if gk is MISSING:
            continue
        data = first_present(rec, aliases.record_data_keys)
        out[str(gk)] = data if data is not MISSING else []
    return out


def resolve_groups(
    container: Any,
    group_keys: Sequence[GroupKey],
    time_keys: Sequence[str],
    aliases: AliasConfig,
    slot: SlotFn,
) -> Optional[RawGroups]:
    """Container of any recognised shape -> {group: [RawPoint]}; None if unrecognised."""
    shape = classify(container, aliases)
    if shape is ContainerShape.MAP_OF_ARRAYS:
        return _groups_from_map(container, group_keys, time_keys, aliases, slot)
    if shape is ContainerShape.ARRAY_OF_GROUP_RECORDS:
        return _groups_from_map(
            _records_to_map(container, aliases), group_keys, time_keys, aliases, slot
        )
    if shape is ContainerShape.FLAT_NUMBER_ARRAY:
        shared = to_points(container, time_keys, aliases, slot)
        return {g: list(shared) for g in group_keys}
    if container is not None:
        logger.debug("Unrecognised container shape: %s", type(container).__name__)
    return None


def _looks_like_series(node: Any, aliases: AliasConfig) -> bool:
    if not isinstance(node, list) or not node:
        return False
    head = node[0]
    return (
        isinstance(head, dict)
        and any(k in head for k in aliases.salvage_time_keys)
        and any(k in head for k in aliases.salvage_value_keys)
    )


def find_series(node: Any, aliases: AliasConfig, limits: LimitConfig) -> Optional[list]:
    """
    Depth-first search for the first array of {time|timestamp, value|val} objects.

    Bounded by depth and by the number of visited nodes.
    """
    stack: List[tuple[Any, int]] = [(node, 0)]
    visited = 0
    while stack:
        current, depth = stack.pop()
        visited += 1
        if visited > limits.salvage_max_nodes:
            logger.debug("Salvage search stopped after %d nodes", limits.salvage_max_nodes)
            return None
        if _looks_like_series(current, aliases):
            return current
        if depth >= limits.salvage_max_depth:
            continue
        if isinstance(current, dict):
            children = list(current.values())
        elif isinstance(current, list):
            children = current
        else:
            continue
        # reversed so the first child is explored first
        for child in reversed(children):
            if isinstance(child, (dict, list)):
                stack.append((child, depth + 1))
    return None


def _salvage_points(series: list, aliases: AliasConfig) -> List[RawPoint]:
    points: List[RawPoint] = []
    for e in series:
        if isinstance(e, dict):
            points.append(
                RawPoint(
                    first_present(e, aliases.salvage_time_keys),
                    first_present(e, aliases.salvage_value_keys),
                )
            )
        else:
            points.append(RawPoint())
    return points


def _legacy_series(obj: Any, aliases: AliasConfig) -> Optional[list]:
    """Top-level single-series array of the older reply contract, if any."""
    if not isinstance(obj, dict):
        return None
    series = first_present(obj, aliases.legacy_series_keys)
    return series if _looks_like_series(series, aliases) else None


def _salvage_root(obj: Any, aliases: AliasConfig) -> Any:
    """The reply minus its monthly containers; monthly totals are never hourly values."""
    if not isinstance(obj, dict):
        return obj
    return {k: v for k, v in obj.items() if k not in aliases.monthly_keys}


def unwrap(
    candidate: Any,
    group_keys: Sequence[GroupKey],
    *,
    start: Optional[pd.Timestamp] = None,
    start_month: Optional[pd.Timestamp] = None,
    config: Optional[NormalizerConfig] = None,
) -> UnwrappedForecast:
    """
    Locate hourly, monthly and analysis data in a parsed reply.

    `start` / `start_month` anchor timestamps synthesized for number-only
    arrays. Anything that cannot be resolved is left as None.
    """
    cfg = config or default_config()
    aliases = cfg.aliases
    result = UnwrappedForecast()
    if not isinstance(candidate, (dict, list)):
        return result

    start = start if start is not None else pd.Timestamp.now(tz="UTC").floor("h")
    if start_month is None:
        start_month = timestamps.first_of_next_month(start)

    def hour_slot(i: int) -> pd.Timestamp:
        return timestamps.hour_at(start, i)

    def month_slot(i: int) -> pd.Timestamp:
        return timestamps.month_at(start_month, i)

    obj = unwrap_envelope(candidate, aliases)

    if isinstance(obj, dict):
        hourly_raw = first_present(obj, aliases.hourly_keys)
        monthly_raw = first_present(obj, aliases.monthly_keys)
        analysis_raw = first_present(obj, aliases.analysis_keys)
        if hourly_raw is not MISSING:
            result.hourly = resolve_groups(
                hourly_raw, group_keys, aliases.hourly_time_keys, aliases, hour_slot
            )
        if monthly_raw is not MISSING:
            result.monthly = resolve_groups(
                monthly_raw, group_keys, aliases.monthly_time_keys, aliases, month_slot
            )
        if analysis_raw is not MISSING:
            result.analysis = analysis_raw

    if result.hourly is None:
        series = _legacy_series(obj, aliases)
        if series is None:
            series = find_series(_salvage_root(obj, aliases), aliases, cfg.limits)
        if series is not None:
            shared = _salvage_points(series, aliases)
            result.hourly = {g: list(shared) for g in group_keys}
            result.salvaged = True
            logger.info("Salvaged a shared %d-point series for %d groups", len(shared), len(group_keys))

    return result
