"""
Search pipeline.
This module loads sequences, runs one of the two searches and projects the
result into both representations for reporting.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from bbmotif.alphabet import decode
from bbmotif.io import read_fasta
from bbmotif.perf import PerfMeter
from bbmotif.projection import alignment_frame, consensus_to_offsets, offsets_to_consensus
from bbmotif.search import ConsensusSearch, registry, run_search
from bbmotif.sequence import Sequence, SequenceSet

SequenceSource = Union[SequenceSet, Iterable[Sequence], str, Path]


class Pipeline:
    """
    Load, search, project.

    The pipeline owns one PerfMeter per search run, so counters from separate
    runs never mix.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def load_sequences(
        self, source: SequenceSource, limit: Optional[int] = None, ignore_case: bool = False
    ) -> SequenceSet:
        """
        Resolve a sequence source and keep the first ``limit`` sequences.

        Args:
            source: FASTA path, SequenceSet or iterable of Sequence objects
            limit: Number of sequences to keep; None or out of range keeps all
            ignore_case: Accept lowercase nucleotides when reading FASTA

        Returns:
            SequenceSet of equal-length sequences
        """
        if isinstance(source, SequenceSet):
            sequences = source
        elif isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(f"Sequence file not found: {path}")
            sequences = SequenceSet(read_fasta(path, case_sensitive=not ignore_case))
        else:
            sequences = SequenceSet(source)

        sequences = sequences.head(limit)
        self.logger.info(f"Using {sequences.num_sequences} sequences of length {sequences.length}")
        return sequences

    def execute_search(
        self,
        sequences: SequenceSet,
        method: str = "consensus",
        width: Optional[int] = None,
        reverse: bool = False,
        bounded: bool = True,
        **kwargs,
    ) -> Dict[str, Any]:
        """
        Run the selected search and build the report dictionary.

        Args:
            sequences: Sequences to search over
            method: 'consensus' or 'alignment' (aliases accepted)
            width: Window width; clamped to 2N-1 when out of range
            reverse: Include reverse-complement placements
            bounded: Prune with the optimistic bound
            **kwargs: Extra keyword arguments for the search class

        Returns:
            JSON-serialisable result dictionary
        """
        method = registry.normalize(method)
        search_cls = registry.get(method)
        perf = PerfMeter()
        search = search_cls(sequences, width=width, reverse=reverse, perf=perf, bounded=bounded, **kwargs)

        self.logger.info(
            f"Running {method} search: T={sequences.num_sequences}, N={sequences.length}, "
            f"W={search.width}, reverse={reverse}"
        )
        result = run_search(search)
        if result is None:
            raise RuntimeError(f"The {method} search returned no result")

        if isinstance(search, ConsensusSearch):
            consensus = result.path
            offsets = consensus_to_offsets(sequences, consensus, reverse)
        else:
            offsets = result.path
            consensus = offsets_to_consensus(sequences, offsets, search.width)

        perf.log_report()
        frame = alignment_frame(sequences, offsets, search.width)
        total = sequences.num_sequences * sequences.length

        return {
            "method": method,
            "score": result.score,
            "percent": round(result.score * 100.0 / total, 1),
            "num_sequences": sequences.num_sequences,
            "length": sequences.length,
            "width": search.width,
            "reverse": reverse,
            "consensus": decode(consensus),
            "offsets": [int(o) for o in offsets],
            "alignment": frame.to_dict(orient="records"),
            "perf": perf.report(),
        }

    def run_pipeline(
        self,
        source: SequenceSource,
        method: str = "consensus",
        width: Optional[int] = None,
        reverse: bool = False,
        limit: Optional[int] = None,
        ignore_case: bool = False,
        **kwargs,
    ) -> Dict[str, Any]:
        """Load sequences from ``source`` and run one search over them."""
        sequences = self.load_sequences(source, limit=limit, ignore_case=ignore_case)
        result = self.execute_search(sequences, method=method, width=width, reverse=reverse, **kwargs)
        self.logger.info("Pipeline completed successfully")
        return result


def run_pipeline(
    source: SequenceSource,
    method: str = "consensus",
    width: Optional[int] = None,
    reverse: bool = False,
    limit: Optional[int] = None,
    ignore_case: bool = False,
    **kwargs,
) -> Dict[str, Any]:
    """
    Module-level function to run the pipeline.

    Args:
        source: FASTA path or sequences
        method: 'consensus' or 'alignment'
        width: Window width
        reverse: Include the reverse strand
        limit: Number of sequences to use
        ignore_case: Accept lowercase nucleotides
        **kwargs: Additional arguments for the search (bounded, max_depth)

    Returns:
        Search results
    """
    pipeline = Pipeline()
    return pipeline.run_pipeline(
        source,
        method=method,
        width=width,
        reverse=reverse,
        limit=limit,
        ignore_case=ignore_case,
        **kwargs,
    )
