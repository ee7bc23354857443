"""High-level public API for consensus and alignment search."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from bbmotif.pipeline import Pipeline, SequenceSource
from bbmotif.search import DEFAULT_MAX_DEPTH, registry


@dataclass
class SearchConfig:
    """Unified configuration object for library usage."""

    sequences: SequenceSource
    method: str = "consensus"
    width: Optional[int] = None
    reverse: bool = False
    limit: Optional[int] = None
    bounded: bool = True
    ignore_case: bool = False
    max_depth: int = DEFAULT_MAX_DEPTH


def create_config(
    sequences: SequenceSource,
    method: str = "consensus",
    width: Optional[int] = None,
    reverse: bool = False,
    limit: Optional[int] = None,
    bounded: bool = True,
    ignore_case: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> SearchConfig:
    """Build a search config, resolving method aliases."""

    if max_depth < 1:
        raise ValueError(f"max_depth must be positive, got {max_depth}")

    return SearchConfig(
        sequences=sequences,
        method=registry.normalize(method),
        width=width,
        reverse=reverse,
        limit=limit,
        bounded=bounded,
        ignore_case=ignore_case,
        max_depth=max_depth,
    )


def find_motif(
    sequences: SequenceSource,
    method: str = "consensus",
    width: Optional[int] = None,
    reverse: bool = False,
    limit: Optional[int] = None,
    bounded: bool = True,
    ignore_case: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict:
    """Single-call entry point for consensus or alignment search."""

    config = create_config(
        sequences=sequences,
        method=method,
        width=width,
        reverse=reverse,
        limit=limit,
        bounded=bounded,
        ignore_case=ignore_case,
        max_depth=max_depth,
    )
    return run_config(config)


def run_config(config: SearchConfig) -> Dict[str, Any]:
    """Execute a search described by a config."""

    return Pipeline().run_pipeline(
        config.sequences,
        method=config.method,
        width=config.width,
        reverse=config.reverse,
        limit=config.limit,
        ignore_case=config.ignore_case,
        bounded=config.bounded,
        max_depth=config.max_depth,
    )
