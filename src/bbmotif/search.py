"""
Branch-and-bound search
=======================

Two dual formulations of the same combinatorial problem share one node
contract (``level``, ``is_leaf``, ``score``, ``bound``, ``expand``):

``ConsensusSearch``
    Assigns one consensus symbol per window column (tree depth W). Every
    sequence is scored at its best placement against the assigned prefix.

``OffsetSearch``
    Assigns one placement per sequence (tree depth T). The score of a
    placement is the sum of the per-column majority counts of its profile.

Both return the same optimal score for the same input. Their pruning differs:
the consensus search threads a ``cutoff`` through siblings, while the offset
search raises a search-wide ``current_best`` as soon as any node, partial or
leaf, scores above it.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from dataclasses import field as dc_field
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from bbmotif.alphabet import ALPHABET, UNASSIGNED
from bbmotif.exceptions import SearchDepthError
from bbmotif.functions import (
    build_profile,
    consensus_from_profile,
    get_level,
    score_consensus_against_sequences,
    score_profile,
)
from bbmotif.perf import PerfMeter
from bbmotif.sequence import SequenceSet, resolve_window

UNPLACED = -1
DEFAULT_MAX_DEPTH = 512
_STACK_HEADROOM = 64


@dataclass(frozen=True)
class SearchResult:
    """Score of a leaf together with the path (consensus symbols or offsets) leading to it."""

    score: int
    path: np.ndarray = dc_field(hash=False, compare=False)

    def __str__(self) -> str:
        return "".join(f"{int(p)};" for p in self.path) + f":{self.score}"


class SearchRegistry:
    """Registry of search strategies using decorator pattern."""

    def __init__(self):
        self._strategies: Dict[str, type] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, key: str, aliases: Optional[List[str]] = None):
        """Decorator to register a search class under ``key`` and its aliases."""

        def decorator(search_cls):
            self._strategies[key] = search_cls
            for alias in [key] + list(aliases or []):
                self._aliases[alias] = key
            logging.debug(f"Registered search strategy: {key} -> {search_cls.__name__}")
            return search_cls

        return decorator

    def normalize(self, method: str) -> str:
        """Map a method name or alias to its registered key."""
        resolved = self._aliases.get(method.lower())
        if resolved is None:
            available = ", ".join(sorted(self._aliases))
            raise ValueError(f"Unknown search method: {method!r}. Available: {available}")
        return resolved

    def get(self, method: str) -> type:
        return self._strategies[self.normalize(method)]


registry = SearchRegistry()


def optimistic_bound(actual: int, remaining: int, gain_per_step: int) -> int:
    """Score reachable if each of the ``remaining`` assignments gained ``gain_per_step``."""
    return actual + gain_per_step * remaining


class SearchNode(ABC):
    """A partial assignment in one of the two search trees."""

    unassigned: int

    def __init__(self, search: "BranchAndBound", state: np.ndarray):
        self.search = search
        self.state = state
        self.level = get_level(state, self.unassigned)

    @property
    def is_leaf(self) -> bool:
        return self.level == self.state.shape[0]

    def remaining(self) -> int:
        return self.state.shape[0] - self.level

    def _child(self, value: int) -> "SearchNode":
        state = self.state.copy()
        state[self.level] = value
        return type(self)(self.search, state)

    @abstractmethod
    def score(self) -> int:
        """Exact score over the assigned entries."""
        raise NotImplementedError

    @abstractmethod
    def bound(self, actual: int) -> int:
        """Admissible upper bound for every leaf below this node."""
        raise NotImplementedError

    @abstractmethod
    def expand(self) -> Iterator["SearchNode"]:
        """Children in increasing order of the value assigned at ``level``."""
        raise NotImplementedError


class ConsensusNode(SearchNode):
    """Consensus prefix; ``0`` marks unassigned columns."""

    unassigned = UNASSIGNED

    def score(self) -> int:
        total, _ = score_consensus_against_sequences(self.search.sequences, self.state, self.search.reverse)
        return total

    def bound(self, actual: int) -> int:
        return optimistic_bound(actual, self.remaining(), self.search.sequences.num_sequences)

    def expand(self) -> Iterator["ConsensusNode"]:
        for symbol in range(1, len(ALPHABET) + 1):
            yield self._child(symbol)


class OffsetNode(SearchNode):
    """Per-sequence offset assignment; ``-1`` marks sequences not yet placed."""

    unassigned = UNPLACED

    def score(self) -> int:
        profile = build_profile(self.search.sequences, self.state, self.search.width)
        return score_profile(profile, consensus_from_profile(profile))

    def bound(self, actual: int) -> int:
        return optimistic_bound(actual, self.remaining(), self.search.sequences.length)

    def expand(self) -> Iterator["OffsetNode"]:
        for offset in range(self.search.num_offsets):
            yield self._child(offset)


class BranchAndBound(ABC):
    """
    Common set-up of both searches.

    Parameters
    ----------
    sequences : SequenceSet
        Equal-length sequences to search over.
    width : int, optional
        Window width W; values outside [N, 2N-1] fall back to 2N-1.
    reverse : bool
        Also consider reverse-complement placements.
    perf : PerfMeter, optional
        Counter sink; a fresh meter is created when omitted.
    bounded : bool
        Prune with the optimistic bound. Disabling it only costs time.
    max_depth : int
        Largest tree depth accepted.
    """

    node_cls: type

    def __init__(
        self,
        sequences: SequenceSet,
        width: Optional[int] = None,
        reverse: bool = False,
        perf: Optional[PerfMeter] = None,
        bounded: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.sequences = sequences
        self.width = resolve_window(width, sequences.length)
        self.reverse = reverse
        self.perf = perf if perf is not None else PerfMeter()
        self.bounded = bounded

        depth = self.depth
        limit = min(max_depth, sys.getrecursionlimit() - _STACK_HEADROOM)
        if depth > limit:
            raise SearchDepthError(f"Search tree depth {depth} exceeds the allowed depth {limit}")

    @property
    def shifts(self) -> int:
        """Number of forward placements of one sequence in the window."""
        return self.width - self.sequences.length + 1

    @property
    def num_offsets(self) -> int:
        """Number of candidate offsets per sequence, both strands included."""
        return 2 * self.shifts if self.reverse else self.shifts

    @property
    @abstractmethod
    def depth(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def initial_state(self) -> np.ndarray:
        """Root node state with nothing assigned."""
        raise NotImplementedError

    @abstractmethod
    def value_range(self) -> Tuple[int, int]:
        """Smallest (the unassigned marker) and largest value a state entry may hold."""
        raise NotImplementedError

    def _root(self, state) -> SearchNode:
        if state is None:
            state = self.initial_state()
        else:
            state = np.asarray(state, dtype=np.int64)
            if state.shape != (self.depth,):
                raise ValueError(f"Initial state must have length {self.depth}, got {state.shape}")
            low, high = self.value_range()
            if np.any((state < low) | (state > high)):
                raise ValueError(f"Initial state values must lie in [{low}, {high}]: {state.tolist()}")
            level = get_level(state, low)
            if np.any(state[level:] != low):
                raise ValueError(f"Assigned entries must precede unassigned ones: {state.tolist()}")
            state = state.astype(self.initial_state().dtype)
        return self.node_cls(self, state)

    @abstractmethod
    def solve(self) -> Optional[SearchResult]:
        """Search the whole tree from an empty root."""
        raise NotImplementedError


@registry.register("consensus", aliases=["c"])
class ConsensusSearch(BranchAndBound):
    """Depth-first search over consensus symbols."""

    node_cls = ConsensusNode

    @property
    def depth(self) -> int:
        return self.width

    def initial_state(self) -> np.ndarray:
        return np.full(self.width, UNASSIGNED, dtype=np.int8)

    def value_range(self) -> Tuple[int, int]:
        return UNASSIGNED, len(ALPHABET)

    def find_consensus(self, prefix=None, cutoff: int = 0) -> Optional[SearchResult]:
        """
        Best consensus extending ``prefix`` that scores at least ``cutoff``.

        Returns None when every leaf below the prefix scores under the cutoff.
        """
        return self._find(self._root(prefix), cutoff)

    def solve(self) -> Optional[SearchResult]:
        return self.find_consensus()

    def _find(self, node: ConsensusNode, cutoff: int) -> Optional[SearchResult]:
        self.perf.count_enter()
        actual = node.score()

        if node.is_leaf:
            self.perf.count_leaf()
            if actual < cutoff:
                return None
            return SearchResult(actual, node.state)

        if self.bounded and node.bound(actual) < cutoff:
            self.perf.count_break()
            return None

        best = None
        for child in node.expand():
            current = self._find(child, cutoff)
            if current is not None:
                # every non-null result is at least the cutoff it was given
                cutoff = current.score
                best = current
        self.perf.count_propagate()
        return best


@registry.register("alignment", aliases=["a", "offset", "offsets"])
class OffsetSearch(BranchAndBound):
    """Depth-first search over per-sequence placements."""

    node_cls = OffsetNode

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.current_best = 0

    @property
    def depth(self) -> int:
        return self.sequences.num_sequences

    def initial_state(self) -> np.ndarray:
        return np.full(self.sequences.num_sequences, UNPLACED, dtype=np.int64)

    def value_range(self) -> Tuple[int, int]:
        return UNPLACED, self.num_offsets - 1

    def find_offsets(self, assignment=None) -> Optional[SearchResult]:
        """Best complete placement extending ``assignment``."""
        root = self._root(assignment)
        self.current_best = 0
        return self._find(root)

    def solve(self) -> Optional[SearchResult]:
        return self.find_offsets()

    def _find(self, node: OffsetNode) -> Optional[SearchResult]:
        self.perf.count_enter()
        actual = node.score()
        if actual > self.current_best:
            self.current_best = actual

        if node.is_leaf:
            self.perf.count_leaf()
            if actual < self.current_best:
                return None
            return SearchResult(actual, node.state)

        if self.bounded and node.bound(actual) < self.current_best:
            self.perf.count_break()
            return None

        best = None
        for child in node.expand():
            current = self._find(child)
            if current is not None and (best is None or current.score > best.score):
                best = current
        self.perf.count_propagate()
        return best


def run_search(search: BranchAndBound) -> Optional[SearchResult]:
    """Run a search from its root and close its meter."""
    logger = logging.getLogger(__name__)
    result = search.solve()
    search.perf.finish()
    logger.debug(f"{type(search).__name__} counters: {search.perf.report()}")
    if result is not None:
        logger.info(f"{type(search).__name__} finished with score {result.score}")
    return result
