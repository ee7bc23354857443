"""Conversion between consensus and offset results, and the alignment table used in reports."""

from __future__ import annotations

import numpy as np
import pandas as pd

from bbmotif.functions import build_profile, consensus_from_profile, score_consensus_against_sequences
from bbmotif.sequence import SequenceSet


def offsets_to_consensus(sequences: SequenceSet, offsets, width: int) -> np.ndarray:
    """Majority consensus of a complete placement."""
    return consensus_from_profile(build_profile(sequences, offsets, width))


def consensus_to_offsets(sequences: SequenceSet, consensus, reverse: bool = False) -> np.ndarray:
    """Best placement of every sequence against a consensus."""
    _, offsets = score_consensus_against_sequences(sequences, consensus, reverse)
    return offsets


def decode_offset(offset: int, width: int, length: int) -> tuple[int, str]:
    """Split an encoded offset into its window start and strand ('+' or '-')."""
    shifts = width - length + 1
    if offset < shifts:
        return int(offset), "+"
    return int(offset - shifts), "-"


def alignment_frame(sequences: SequenceSet, offsets, width: int) -> pd.DataFrame:
    """One row per placed sequence: where it sits in the window and on which strand."""
    length = sequences.length
    results = []
    for seq, offset in zip(sequences, offsets, strict=False):
        if offset < 0:
            break
        start, strand = decode_offset(int(offset), width, length)
        site = seq.symbol_chars(strand == "+")
        results.append(
            {
                "name": seq.name,
                "offset": int(offset),
                "start": start,
                "end": start + length,
                "strand": strand,
                "site": site,
                "aligned": " " * start + site + " " * (width - start - length),
            }
        )
    return pd.DataFrame(results, columns=["name", "offset", "start", "end", "strand", "site", "aligned"])
