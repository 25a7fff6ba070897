from __future__ import annotations
import logging
from typing import Any, Optional

import pandas as pd
from pydantic import ValidationError

from . import normalize, timestamps, utils
from .config import NormalizerConfig, default_config
from .schema import AnalysisReply
from .types import MISSING, AnalysisSummary, HourlySeries
from .unwrap import to_points

logger = logging.getLogger(__name__)


def _preview(
    raw: Any, start: pd.Timestamp, cfg: NormalizerConfig
) -> HourlySeries:
    aliases = cfg.aliases
    entries = utils.first_present(raw, aliases.preview_keys) if isinstance(raw, dict) else MISSING
    points = None
    if isinstance(entries, list):
        points = to_points(
            entries,
            aliases.hourly_time_keys,
            aliases,
            lambda i: timestamps.hour_at(start, i),
        )
    series, _filled = normalize.hourly_series(points, start, 0, cfg)
    return series


def sanitize(
    raw: Any,
    start: Optional[pd.Timestamp] = None,
    config: Optional[NormalizerConfig] = None,
) -> AnalysisSummary:
    """
    Clamp and repair an untrusted analysis object.

    - avg/min/max -> numbers in [0, summary_value_max] (0 on garbage)
    - peakHour -> rounded integer in [0, 23]
    - min <= avg <= max enforced by lowering min / raising max
    - drivers / recommendations -> bounded lists of bounded strings, nulls dropped
    - preview -> 48-point hourly series from generated_forecast, else synthetic

    The field repairs live on schema.AnalysisReply.
    """
    cfg = config or default_config()
    if start is None:
        start = pd.Timestamp.now(tz="UTC").floor("h")

    if not isinstance(raw, dict):
        if raw is not None:
            logger.debug("Analysis is %s, not an object; using defaults", type(raw).__name__)
        return AnalysisSummary(preview=_preview(None, start, cfg))

    try:
        reply = AnalysisReply.model_validate(raw, context={"limits": cfg.limits})
    except ValidationError:
        logger.warning("Analysis object could not be repaired; using defaults", exc_info=True)
        reply = AnalysisReply()

    summary = reply.summary
    return AnalysisSummary(
        avg=summary.avg,
        min=summary.min,
        max=summary.max,
        peak_hour=summary.peak_hour,
        drivers=tuple(reply.drivers),
        recommendations=tuple(reply.recommendations),
        preview=_preview(raw, start, cfg),
    )
