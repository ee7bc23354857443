import numpy as np
from numba import njit

from bbmotif.sequence import SequenceSet

N_ROWS = 5


@njit(cache=True)
def leading_assigned(state, unassigned):
    """Number of leading entries of a search state that differ from ``unassigned``."""
    for i in range(state.shape[0]):
        if state[i] == unassigned:
            return i
    return state.shape[0]


@njit(cache=True)
def _build_profile_jit(forward, reverse, offsets, width):
    """Count placed symbols per (symbol, column) for a possibly partial placement."""
    n_seq = forward.shape[0]
    length = forward.shape[1]
    shifts = width - length + 1
    profile = np.zeros((N_ROWS, width), dtype=np.int64)

    for i in range(n_seq):
        off = offsets[i]
        if off < 0:
            continue
        if off < shifts:
            for j in range(length):
                profile[forward[i, j], off + j] += 1
        else:
            off -= shifts
            for j in range(length):
                profile[reverse[i, j], off + j] += 1

    return profile


@njit(cache=True)
def _consensus_from_profile_jit(profile):
    """Majority symbol per column, lowest index on ties."""
    width = profile.shape[1]
    consensus = np.empty(width, dtype=np.int8)
    for col in range(width):
        best = 1
        for sym in range(2, N_ROWS):
            if profile[sym, col] > profile[best, col]:
                best = sym
        consensus[col] = best
    return consensus


@njit(cache=True)
def _score_profile_jit(profile, consensus):
    """Sum of profile counts selected by the consensus symbols."""
    score = 0
    for col in range(consensus.shape[0]):
        sym = consensus[col]
        if sym > 0:
            score += profile[sym, col]
    return score


@njit(cache=True)
def _strand_matches(seq, consensus, start, level):
    """Matches of ``seq`` placed at ``start``, counting only assigned columns."""
    score = 0
    for w in range(seq.shape[0]):
        if start + w < level and seq[w] == consensus[start + w]:
            score += 1
    return score


@njit(cache=True)
def _score_consensus_jit(forward, reverse, consensus, use_reverse):
    """Best placement of every sequence against a possibly partial consensus."""
    n_seq = forward.shape[0]
    length = forward.shape[1]
    width = consensus.shape[0]
    shifts = width - length + 1
    level = leading_assigned(consensus, 0)

    total = 0
    best_offsets = np.zeros(n_seq, dtype=np.int64)
    for j in range(n_seq):
        best = 0
        for i in range(shifts):
            score = _strand_matches(forward[j], consensus, i, level)
            if score > best:
                best = score
                best_offsets[j] = i
            if use_reverse:
                score = _strand_matches(reverse[j], consensus, i, level)
                if score > best:
                    best = score
                    best_offsets[j] = i + shifts
        total += best

    return total, best_offsets


def _check_width(sequences: SequenceSet, width: int) -> None:
    """Raise ValueError when the window cannot hold the sequences."""
    length = sequences.length
    if width < length or width > 2 * length - 1:
        raise ValueError(f"Window width {width} outside [{length}, {2 * length - 1}]")


def build_profile(sequences: SequenceSet, offsets, width: int) -> np.ndarray:
    """
    Build the ``(5, W)`` symbol-by-column count table of a placement.

    Row 0 stays zero so that rows are addressed by 1-based symbol index.
    Negative offsets mark sequences that are not placed yet and contribute
    nothing. Offsets from ``W-N+1`` upward place the reverse strand at slot
    ``offset - (W-N+1)``.
    """
    _check_width(sequences, width)
    offsets = np.asarray(offsets, dtype=np.int64)
    if offsets.shape[0] != sequences.num_sequences:
        raise ValueError(f"Expected {sequences.num_sequences} offsets, got {offsets.shape[0]}")
    upper = 2 * (width - sequences.length + 1)
    if np.any(offsets >= upper):
        raise ValueError(f"Offsets must be below {upper} for width {width}: {offsets.tolist()}")
    return _build_profile_jit(sequences.forward, sequences.reverse, offsets, width)


def _check_profile(profile: np.ndarray) -> np.ndarray:
    """Coerce a profile to int64 and raise ValueError unless it is a (5, W) table."""
    profile = np.asarray(profile, dtype=np.int64)
    if profile.ndim != 2 or profile.shape[0] != N_ROWS:
        raise ValueError(f"Profile must have shape ({N_ROWS}, W), got {profile.shape}")
    return profile


def consensus_from_profile(profile: np.ndarray) -> np.ndarray:
    """Per-column majority symbol of a profile; ties go to the lowest index."""
    return _consensus_from_profile_jit(_check_profile(profile))


def score_profile(profile: np.ndarray, consensus) -> int:
    """Score of a consensus against a profile."""
    profile = _check_profile(profile)
    consensus = np.asarray(consensus, dtype=np.int64)
    if consensus.ndim != 1 or consensus.shape[0] > profile.shape[1]:
        raise ValueError(f"Consensus of shape {consensus.shape} does not fit a profile of width {profile.shape[1]}")
    if np.any((consensus < 0) | (consensus >= N_ROWS)):
        raise ValueError(f"Consensus symbols must lie in [0, {N_ROWS - 1}]: {consensus.tolist()}")
    return int(_score_profile_jit(profile, consensus.astype(np.int8)))


def score_consensus_against_sequences(sequences: SequenceSet, consensus, reverse: bool = False):
    """
    Score a (partial) consensus against every sequence at its best placement.

    Returns the total score and the per-sequence best offsets, encoded the
    same way as the offsets accepted by :func:`build_profile`.
    """
    consensus = np.asarray(consensus, dtype=np.int8)
    _check_width(sequences, consensus.shape[0])
    total, offsets = _score_consensus_jit(sequences.forward, sequences.reverse, consensus, reverse)
    return int(total), offsets


def get_level(state, unassigned: int) -> int:
    """Depth of a search node: the count of leading assigned entries."""
    return int(leading_assigned(np.asarray(state), unassigned))
