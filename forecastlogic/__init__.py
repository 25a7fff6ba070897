from . import (
    canon,
    config,
    exceptions,
    types,
    utils,
    timestamps,
    synthetic,
    extract,
    unwrap,
    normalize,
    analysis,
    context,
    pipeline,
    formats,
    schema,
)
from .pipeline import run

__all__ = [
    "canon",
    "config",
    "exceptions",
    "types",
    "utils",
    "timestamps",
    "synthetic",
    "extract",
    "unwrap",
    "normalize",
    "analysis",
    "context",
    "pipeline",
    "formats",
    "schema",
    "run",
]
