from __future__ import annotations
import logging
from typing import Any, Callable, Iterable, List, Optional, TypeVar

import pandas as pd

from . import analysis, exceptions, extract, normalize, timestamps, unwrap
from .context import local_analysis
from .config import NormalizerConfig, default_config
from .types import (
    AnalysisSummary,
    ForecastBundle,
    GroupKey,
    RawExtraction,
    TrainingAggregates,
    UnwrappedForecast,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _stage(name: str, fn: Callable[[], T], fallback: Callable[[], T]) -> T:
    """Run one stage; an unexpected failure degrades to the stage's missing-input result."""
    try:
        return fn()
    except Exception:
        logger.warning("Stage '%s' failed; degrading to fallback", name, exc_info=True)
        return fallback()


def _unique_keys(group_keys: Iterable[Any]) -> List[GroupKey]:
    seen: set[str] = set()
    out: List[GroupKey] = []
    for g in group_keys:
        k = str(g)
        if k not in seen:
            seen.add(k)
            out.append(k)
    return out


def run(
    response_text: Optional[str],
    group_keys: Iterable[Any],
    start: Any = None,
    *,
    aggregates: Optional[TrainingAggregates] = None,
    config: Optional[NormalizerConfig] = None,
) -> ForecastBundle:
    """
    Turn an untrusted generative-service reply into a complete ForecastBundle.

    - response_text None: every series is synthetic; the analysis is the
      sanitized local analysis when `aggregates` is given, else the default.
    - otherwise: extract -> unwrap -> normalize / sanitize, each stage
      degrading to its missing-input behaviour instead of raising.

    `group_keys` is authoritative: the bundle holds exactly these keys.
    `start` is any value accepted by timestamps.parse_start (None -> now).
    """
    cfg = config or default_config()
    keys = _unique_keys(group_keys)
    exceptions.require(
        len(keys) > 0, "At least one group key is required.", exceptions.PipelineInputError
    )

    start_ts = timestamps.canonicalize_hour(timestamps.parse_start(start))
    start_month = timestamps.first_of_next_month(start_ts)

    if response_text is None:
        logger.info("No reply text; synthesizing %d groups", len(keys))
        return _synthetic_bundle(keys, start_ts, start_month, aggregates, cfg)

    raw: RawExtraction = _stage(
        "extract",
        lambda: extract.extract(response_text, cfg.aliases),
        lambda: RawExtraction(source_text=str(response_text)),
    )
    if raw.candidate is None:
        logger.info("Reply carried no structured data; synthesizing %d groups", len(keys))

    parts: UnwrappedForecast = _stage(
        "unwrap",
        lambda: unwrap.unwrap(
            raw.candidate, keys, start=start_ts, start_month=start_month, config=cfg
        ),
        UnwrappedForecast,
    )

    hourly = _stage(
        "normalize_hourly",
        lambda: normalize.normalize_hourly(parts.hourly, keys, start_ts, cfg),
        lambda: normalize.normalize_hourly(None, keys, start_ts, cfg),
    )
    monthly = _stage(
        "normalize_monthly",
        lambda: normalize.normalize_monthly(parts.monthly, keys, start_month, cfg),
        lambda: normalize.normalize_monthly(None, keys, start_month, cfg),
    )
    summary: AnalysisSummary = _stage(
        "sanitize",
        lambda: analysis.sanitize(parts.analysis, start_ts, cfg),
        lambda: analysis.sanitize(None, start_ts, cfg),
    )
    return ForecastBundle(hourly=hourly, monthly=monthly, analysis=summary)


def _synthetic_bundle(
    keys: List[GroupKey],
    start_ts: pd.Timestamp,
    start_month: pd.Timestamp,
    aggregates: Optional[TrainingAggregates],
    cfg: NormalizerConfig,
) -> ForecastBundle:
    raw_analysis = None
    if aggregates is not None:
        raw_analysis = local_analysis(aggregates)
    return ForecastBundle(
        hourly=normalize.normalize_hourly(None, keys, start_ts, cfg),
        monthly=normalize.normalize_monthly(None, keys, start_month, cfg),
        analysis=analysis.sanitize(raw_analysis, start_ts, cfg),
    )
