"""Locate a JSON candidate inside free-form generative-service replies."""

from __future__ import annotations
import json
import logging
import re
from typing import Any, Callable, List, Optional, Tuple

from .config import AliasConfig
from .types import RawExtraction

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```[A-Za-z0-9_-]*")

Strategy = Callable[[str], Optional[Any]]


def _loads(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _structured(value: Any) -> Optional[Any]:
    """Only objects and arrays count as candidates."""
    return value if isinstance(value, (dict, list)) else None


def whole_text(text: str) -> Optional[Any]:
    return _structured(_loads(text.strip()))


def without_fences(text: str) -> Optional[Any]:
    if "```" not in text:
        return None
    return _structured(_loads(_FENCE.sub("", text).strip()))


def _between(text: str, open_ch: str, close_ch: str) -> Optional[str]:
    lo = text.find(open_ch)
    hi = text.rfind(close_ch)
    if lo < 0 or hi <= lo:
        return None
    return text[lo : hi + 1]


def outer_object(text: str) -> Optional[Any]:
    chunk = _between(text, "{", "}")
    if chunk is None:
        return None
    value = _loads(chunk)
    return value if isinstance(value, dict) else None


def outer_array(text: str) -> Optional[Any]:
    chunk = _between(text, "[", "]")
    if chunk is None:
        return None
    value = _loads(chunk)
    return value if isinstance(value, list) else None


STRATEGIES: List[Tuple[str, Strategy]] = [
    ("whole_text", whole_text),
    ("without_fences", without_fences),
    ("outer_object", outer_object),
    ("outer_array", outer_array),
]


def _first_candidate(text: str) -> Tuple[Optional[str], Optional[Any]]:
    for name, strategy in STRATEGIES:
        candidate = strategy(text)
        if candidate is not None:
            return name, candidate
    return None, None


def envelope_text(candidate: Any, aliases: Optional[AliasConfig] = None) -> Optional[str]:
    """
    Inner reply text of a transport envelope, or None if `candidate` is not one.

    Recognised:
      - {"candidates": [{"content": {"parts": [{"text": ...}]}}]}
      - {"output_text": ...}
      - {"results": [{"output_text": ...}]}
    A proxy reply that already carries the forecast is not an envelope.
    """
    aliases = aliases or AliasConfig()
    if not isinstance(candidate, dict):
        return None
    if any(k in candidate for k in aliases.forecast_keys()):
        return None

    candidates = candidate.get("candidates")
    if isinstance(candidates, list):
        texts: list[str] = []
        for c in candidates:
            content = c.get("content") if isinstance(c, dict) else None
            parts = content.get("parts") if isinstance(content, dict) else None
            if not isinstance(parts, list):
                continue
            for p in parts:
                t = p.get("text") if isinstance(p, dict) else None
                if t:
                    texts.append(str(t))
        return "\n".join(texts).strip()

    if candidate.get("output_text") is not None:
        return str(candidate["output_text"]).strip()

    results = candidate.get("results")
    if isinstance(results, list) and results:
        first = results[0]
        if isinstance(first, dict) and first.get("output_text") is not None:
            return str(first["output_text"]).strip()

    return None


def extract(text: Optional[str], aliases: Optional[AliasConfig] = None) -> RawExtraction:
    """
    Find the JSON object/array carried by a reply.

    Strategies are tried in order (whole text, fence-stripped text, outermost
    braces, outermost brackets); the first parseable one wins. Envelopes are
    opened once and their inner text searched the same way. Never raises:
    no candidate is reported as `candidate=None`.
    """
    if not isinstance(text, str) or not text.strip():
        return RawExtraction(source_text=text if isinstance(text, str) else "")

    name, candidate = _first_candidate(text)
    if candidate is None:
        logger.debug("No JSON candidate in %d chars of reply text", len(text))
        return RawExtraction(source_text=text)

    inner = envelope_text(candidate, aliases)
    if inner is not None:
        inner_name, inner_candidate = _first_candidate(inner) if inner else (None, None)
        if inner_candidate is None:
            logger.debug("Envelope carried no JSON candidate")
            return RawExtraction(source_text=inner)
        logger.debug("Envelope opened; inner candidate via %s", inner_name)
        return RawExtraction(
            source_text=inner, candidate=inner_candidate, strategy=f"envelope/{inner_name}"
        )

    logger.debug("JSON candidate found via %s", name)
    return RawExtraction(source_text=text, candidate=candidate, strategy=name)
