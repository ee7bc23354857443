"""
bbmotif
=======

Exact branch-and-bound search for the best common motif of a set of
equal-length DNA sequences. Two dual formulations of the problem are
provided and always agree on the optimal score:

``search.ConsensusSearch``
    Enumerates consensus symbols column by column across a window of width W.

``search.OffsetSearch``
    Enumerates the placement (and optionally the strand) of every sequence
    within the window.

The top level modules expose the following key components:

``alphabet``
    Symbol codec for the A/C/G/T alphabet and reverse complementation.

``sequence``
    Immutable ``Sequence`` objects and the stacked ``SequenceSet``.

``functions``
    JIT-compiled profile construction and scoring kernels.

``projection``
    Conversion between a consensus and an offset alignment.

``pipeline`` / ``api``
    Loading, searching and reporting in one call.

``cli``
    Command line interface.
"""

from bbmotif.api import SearchConfig, create_config, find_motif
from bbmotif.exceptions import InvalidSymbolError, LengthMismatchError, SearchDepthError
from bbmotif.search import ConsensusSearch, OffsetSearch, SearchResult
from bbmotif.sequence import Sequence, SequenceSet

__all__ = [
    "ConsensusSearch",
    "InvalidSymbolError",
    "LengthMismatchError",
    "OffsetSearch",
    "SearchConfig",
    "SearchDepthError",
    "SearchResult",
    "Sequence",
    "SequenceSet",
    "create_config",
    "find_motif",
]
