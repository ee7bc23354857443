"""
Tests for the two branch-and-bound searches in bbmotif/search.py.
"""

import numpy as np
import pytest

from bbmotif.exceptions import SearchDepthError
from bbmotif.functions import build_profile, consensus_from_profile, score_consensus_against_sequences, score_profile
from bbmotif.perf import PerfMeter
from bbmotif.projection import consensus_to_offsets, offsets_to_consensus
from bbmotif.search import (
    ConsensusNode,
    ConsensusSearch,
    OffsetNode,
    OffsetSearch,
    SearchResult,
    optimistic_bound,
    registry,
    run_search,
)
from bbmotif.sequence import SequenceSet

A, C, G, T = 1, 2, 3, 4


def random_sequences(rng, n_seq, length):
    """Random A/C/G/T sequences as a SequenceSet."""
    strings = ["".join(rng.choice(list("ACGT"), size=length)) for _ in range(n_seq)]
    return SequenceSet.from_strings(strings)


def assert_counts_balanced(perf: PerfMeter):
    """Every entered node leaves through exactly one exit."""
    assert perf.entered > 0
    assert perf.entered == perf.leaf + perf.broken + perf.propagated


@pytest.mark.parametrize("reverse, expected", [(False, 13), (True, 14)])
def test_find_consensus_5x3(seqs_5x3, reverse, expected):
    """Test optimal consensus score of the 5x3 set"""
    search = ConsensusSearch(seqs_5x3, width=5, reverse=reverse)
    result = search.find_consensus()
    assert result.score == expected
    assert result.path.shape == (5,)
    assert np.all(result.path > 0)


@pytest.mark.parametrize("reverse, expected", [(False, 13), (True, 14)])
def test_find_offsets_5x3(seqs_5x3, reverse, expected):
    """Test optimal alignment score of the 5x3 set"""
    search = OffsetSearch(seqs_5x3, width=5, reverse=reverse)
    result = search.find_offsets()
    assert result.score == expected
    assert np.all(result.path >= 0)
    assert np.all(result.path < search.num_offsets)


@pytest.mark.parametrize("bounded", [True, False])
def test_tied_optima_choice(seqs_5x3, bounded):
    """Test which optimum each search reports when several score the same"""
    # AAGCC and AAGCT both score 13; consensus search keeps the later one
    consensus = ConsensusSearch(seqs_5x3, width=5, bounded=bounded).find_consensus()
    assert list(consensus.path) == [A, A, G, C, T]
    assert consensus.score == 13

    # offset search keeps the first optimal placement in enumeration order
    alignment = OffsetSearch(seqs_5x3, width=5, bounded=bounded).find_offsets()
    assert list(alignment.path) == [0, 2, 1, 1, 2]
    assert alignment.score == 13
    assert list(consensus_to_offsets(seqs_5x3, consensus.path)) == [0, 2, 1, 1, 2]


def test_default_width_is_widest(seqs_5x3):
    """Test that an out-of-range width falls back to 2N-1"""
    assert ConsensusSearch(seqs_5x3).width == 5
    assert ConsensusSearch(seqs_5x3, width=0).width == 5
    assert OffsetSearch(seqs_5x3, width=9).width == 5
    assert OffsetSearch(seqs_5x3, width=4).width == 4


def test_search_results_reproduce_their_scores(seqs_5x3):
    """Test that each result path re-scores to the reported score"""
    for reverse in (False, True):
        consensus = ConsensusSearch(seqs_5x3, width=5, reverse=reverse).find_consensus()
        score, offsets = score_consensus_against_sequences(seqs_5x3, consensus.path, reverse)
        assert score == consensus.score

        profile = build_profile(seqs_5x3, offsets, 5)
        assert score_profile(profile, consensus_from_profile(profile)) == consensus.score

        alignment = OffsetSearch(seqs_5x3, width=5, reverse=reverse).find_offsets()
        profile = build_profile(seqs_5x3, alignment.path, 5)
        assert score_profile(profile, consensus_from_profile(profile)) == alignment.score


def test_projection_between_results(seqs_5x3):
    """Test that projecting one result yields the other representation's score"""
    alignment = OffsetSearch(seqs_5x3, width=5).find_offsets()
    consensus = offsets_to_consensus(seqs_5x3, alignment.path, 5)
    score, _ = score_consensus_against_sequences(seqs_5x3, consensus)
    assert score == alignment.score

    result = ConsensusSearch(seqs_5x3, width=5).find_consensus()
    offsets = consensus_to_offsets(seqs_5x3, result.path)
    profile = build_profile(seqs_5x3, offsets, 5)
    assert score_profile(profile, consensus_from_profile(profile)) == result.score


def test_width_equal_to_length_has_no_shift(seqs_5x3):
    """Test W = N, where every sequence sits at offset 0"""
    alignment = OffsetSearch(seqs_5x3, width=3).find_offsets()
    assert list(alignment.path) == [0, 0, 0, 0, 0]
    assert alignment.score == 7

    consensus = ConsensusSearch(seqs_5x3, width=3).find_consensus()
    assert consensus.score == 7


@pytest.mark.parametrize("reverse", [False, True])
def test_formulations_agree_on_random_input(reverse):
    """Test that both searches find the same optimum"""
    rng = np.random.default_rng(127)
    for length in range(2, 5):
        for n_seq in range(2, 5):
            sequences = random_sequences(rng, n_seq, length)
            for width in (length, 2 * length - 1):
                consensus = ConsensusSearch(sequences, width=width, reverse=reverse).find_consensus()
                alignment = OffsetSearch(sequences, width=width, reverse=reverse).find_offsets()
                assert consensus.score == alignment.score


@pytest.mark.parametrize("reverse", [False, True])
def test_pruning_does_not_change_optimum(seqs_5x3, reverse):
    """Test that disabling the bound gives the same score with more work"""
    for search_cls in (ConsensusSearch, OffsetSearch):
        bounded = search_cls(seqs_5x3, width=5, reverse=reverse)
        exhaustive = search_cls(seqs_5x3, width=5, reverse=reverse, bounded=False)
        assert run_search(bounded).score == run_search(exhaustive).score
        assert exhaustive.perf.broken == 0
        assert exhaustive.perf.entered >= bounded.perf.entered


def test_pruning_on_random_input():
    """Test bounded and exhaustive searches on random sequences"""
    rng = np.random.default_rng(2024)
    for _ in range(3):
        sequences = random_sequences(rng, 3, 3)
        for search_cls in (ConsensusSearch, OffsetSearch):
            bounded = search_cls(sequences, reverse=True).solve()
            exhaustive = search_cls(sequences, reverse=True, bounded=False).solve()
            assert bounded.score == exhaustive.score


def test_counters_balanced(seqs_5x3):
    """Test one exit per entered node in both searches"""
    for search_cls in (ConsensusSearch, OffsetSearch):
        search = search_cls(seqs_5x3, width=5, reverse=True)
        run_search(search)
        assert_counts_balanced(search.perf)
        assert search.perf.ended is not None


def test_consensus_pruning_happens(seqs_5x3):
    """Test that the bound actually cuts branches"""
    search = ConsensusSearch(seqs_5x3, width=5)
    search.find_consensus()
    assert search.perf.broken > 0
    # a full tree of depth 5 and branching 4 has 1365 nodes
    assert search.perf.entered < 1365


def test_shared_meter_accumulates(seqs_5x3):
    """Test that one meter can collect counters of several searches"""
    perf = PerfMeter()
    ConsensusSearch(seqs_5x3, perf=perf).find_consensus()
    first = perf.entered
    OffsetSearch(seqs_5x3, perf=perf).find_offsets()
    assert perf.entered > first
    assert_counts_balanced(perf)


def test_cutoff_above_optimum_returns_none(seqs_5x3):
    """Test that no result is reported when nothing reaches the cutoff"""
    search = ConsensusSearch(seqs_5x3, width=5)
    assert search.find_consensus(cutoff=14) is None
    assert search.find_consensus(cutoff=13).score == 13
    assert_counts_balanced(search.perf)


def test_find_consensus_from_prefix(seqs_5x3):
    """Test search restricted to a given prefix"""
    search = ConsensusSearch(seqs_5x3, width=5)
    result = search.find_consensus([1, 1, 3, 0, 0])
    assert list(result.path[:3]) == [1, 1, 3]
    assert result.score == 13


def test_find_offsets_from_partial_assignment(seqs_5x3):
    """Test search with the first sequence already placed"""
    search = OffsetSearch(seqs_5x3, width=5)
    result = search.find_offsets([0, -1, -1, -1, -1])
    assert result.path[0] == 0
    assert result.score == 13


def test_initial_state_validation(seqs_5x3):
    """Test rejection of malformed initial states"""
    with pytest.raises(ValueError):
        ConsensusSearch(seqs_5x3, width=5).find_consensus([0, 0, 0])
    with pytest.raises(ValueError):
        OffsetSearch(seqs_5x3, width=5).find_offsets([3, -1, -1, -1, -1])
    with pytest.raises(ValueError):
        OffsetSearch(seqs_5x3, width=5).find_offsets([-1, 2, -1, -1, -1])
    with pytest.raises(ValueError):
        OffsetSearch(seqs_5x3, width=5).find_offsets([0, -2, -1, -1, -1])
    with pytest.raises(ValueError):
        ConsensusSearch(seqs_5x3, width=5).find_consensus([0, 4, 0, 0, 0])
    with pytest.raises(ValueError):
        ConsensusSearch(seqs_5x3, width=5).find_consensus([1, 5, 0, 0, 0])
    with pytest.raises(ValueError):
        ConsensusSearch(seqs_5x3, width=5).find_consensus([1, -1, 0, 0, 0])

    # reverse offsets only exist when the reverse strand is searched
    assert OffsetSearch(seqs_5x3, width=5, reverse=True).find_offsets([5, -1, -1, -1, -1]).path[0] == 5


def test_search_depth_guard(seqs_5x3):
    """Test that overly deep trees are refused at construction"""
    with pytest.raises(SearchDepthError):
        ConsensusSearch(seqs_5x3, width=5, max_depth=4)
    with pytest.raises(SearchDepthError):
        OffsetSearch(seqs_5x3, max_depth=4)
    OffsetSearch(seqs_5x3, max_depth=5)


def test_consensus_node_expand(seqs_5x3):
    """Test children of a consensus prefix"""
    search = ConsensusSearch(seqs_5x3, width=5)
    node = ConsensusNode(search, np.array([2, 0, 0, 0, 0], dtype=np.int8))
    children = list(node.expand())
    assert [list(child.state[:2]) for child in children] == [[2, 1], [2, 2], [2, 3], [2, 4]]
    assert all(child.level == 2 for child in children)
    assert list(node.state) == [2, 0, 0, 0, 0]


@pytest.mark.parametrize("reverse, expected", [(False, 3), (True, 6)])
def test_offset_node_expand(seqs_5x3, reverse, expected):
    """Test children of an offset assignment"""
    search = OffsetSearch(seqs_5x3, width=5, reverse=reverse)
    node = OffsetNode(search, np.array([1, -1, -1, -1, -1]))
    children = list(node.expand())
    assert len(children) == expected
    assert [int(child.state[1]) for child in children] == list(range(expected))
    assert list(node.state) == [1, -1, -1, -1, -1]


def test_bounds(seqs_5x3):
    """Test optimistic bounds of partial nodes"""
    assert optimistic_bound(3, 2, 5) == 13

    consensus_search = ConsensusSearch(seqs_5x3, width=5)
    node = ConsensusNode(consensus_search, np.array([1, 1, 0, 0, 0], dtype=np.int8))
    assert node.bound(node.score()) == node.score() + 5 * 3

    offset_search = OffsetSearch(seqs_5x3, width=5)
    node = OffsetNode(offset_search, np.array([0, 2, -1, -1, -1]))
    assert node.bound(node.score()) == node.score() + 3 * 3


def test_leaf_nodes(seqs_5x3):
    """Test leaf detection"""
    search = OffsetSearch(seqs_5x3, width=5)
    assert OffsetNode(search, np.array([0, 0, 0, 0, 0])).is_leaf
    assert not OffsetNode(search, np.array([0, 0, 0, 0, -1])).is_leaf


def test_search_result_str():
    """Test printable form of a result"""
    assert str(SearchResult(13, np.array([1, 2]))) == "1;2;:13"


def test_registry_aliases():
    """Test method name resolution"""
    assert registry.get("consensus") is ConsensusSearch
    assert registry.get("c") is ConsensusSearch
    assert registry.get("alignment") is OffsetSearch
    assert registry.get("Offsets") is OffsetSearch
    with pytest.raises(ValueError):
        registry.get("heuristic")
