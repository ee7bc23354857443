"""
Sequence containers
===================

``Sequence`` wraps one encoded nucleotide sequence together with its reverse
strand. ``SequenceSet`` stacks a group of equal-length sequences into two
``(T, N)`` matrices so that the scoring kernels in :mod:`bbmotif.functions`
can work on plain arrays.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field as dc_field
from typing import Iterable, List

import numpy as np

from bbmotif.alphabet import decode, encode, reverse_complement
from bbmotif.exceptions import LengthMismatchError


@dataclass(frozen=True, eq=False)
class Sequence:
    """Immutable encoded DNA sequence.

    Attributes
    ----------
    name : str
        Identifier of the sequence (first token of the FASTA header)
    forward : np.ndarray
        Symbol indices of the given strand
    reverse : np.ndarray
        Symbol indices of the reverse-complement strand
    """

    name: str
    forward: np.ndarray = dc_field(hash=False, repr=False)
    reverse: np.ndarray = dc_field(hash=False, repr=False)

    def __hash__(self):
        """Hash on the name and the textual sequence."""
        return hash((self.name, decode(self.forward)))

    def __eq__(self, other):
        if not isinstance(other, Sequence):
            return NotImplemented
        return self.name == other.name and np.array_equal(self.forward, other.forward)

    @classmethod
    def from_string(cls, name: str, text: str, case_sensitive: bool = True) -> "Sequence":
        """Encode ``text``; raises InvalidSymbolError on characters outside ACGT."""
        forward = encode(text, case_sensitive=case_sensitive)
        reverse = reverse_complement(forward)
        forward.setflags(write=False)
        reverse.setflags(write=False)
        return cls(name=name, forward=forward, reverse=reverse)

    @property
    def length(self) -> int:
        return int(self.forward.size)

    def __len__(self) -> int:
        return self.length

    def symbols(self, strand: bool = True) -> np.ndarray:
        """Symbol indices of the original (True) or reverse (False) strand."""
        return self.forward if strand else self.reverse

    def symbol_index(self, position: int, strand: bool = True) -> int:
        """Symbol index at ``position`` of the requested strand."""
        if not 0 <= position < self.length:
            raise IndexError(f"Attempt to retrieve invalid index {position} in {self.name!r}")
        return int(self.symbols(strand)[position])

    def symbol_chars(self, strand: bool = True) -> str:
        return decode(self.symbols(strand))

    def __str__(self) -> str:
        return f"{self.name} ({self.length})"


class SequenceSet:
    """
    Equal-length sequences stacked for the scoring kernels.

    The forward and reverse strands are stored as two ``(T, N)`` int8 matrices.
    Construction fails with LengthMismatchError when the lengths differ.
    """

    def __init__(self, sequences: Iterable[Sequence]):
        self.sequences: List[Sequence] = list(sequences)
        if not self.sequences:
            raise ValueError("At least one sequence is required")

        lengths = {seq.length for seq in self.sequences}
        if len(lengths) != 1:
            raise LengthMismatchError(f"Different lengths of sequences: {sorted(lengths)}")
        if 0 in lengths:
            raise ValueError("Sequences must not be empty")

        self.forward = np.stack([seq.forward for seq in self.sequences]).astype(np.int8)
        self.reverse = np.stack([seq.reverse for seq in self.sequences]).astype(np.int8)

    @classmethod
    def from_strings(cls, strings: Iterable[str], prefix: str = "S") -> "SequenceSet":
        """Build a set from raw strings, naming them ``S1``, ``S2``, ..."""
        return cls(Sequence.from_string(f"{prefix}{i + 1}", text) for i, text in enumerate(strings))

    @property
    def length(self) -> int:
        """Common length N of every sequence."""
        return int(self.forward.shape[1])

    @property
    def num_sequences(self) -> int:
        return int(self.forward.shape[0])

    @property
    def names(self) -> List[str]:
        return [seq.name for seq in self.sequences]

    def head(self, limit: int | None) -> "SequenceSet":
        """Return the first ``limit`` sequences; ``None`` or out-of-range means all."""
        if limit is None or limit < 1 or limit >= self.num_sequences:
            return self
        return SequenceSet(self.sequences[:limit])

    def __len__(self) -> int:
        return self.num_sequences

    def __iter__(self):
        return iter(self.sequences)

    def __getitem__(self, i: int) -> Sequence:
        return self.sequences[i]


def max_width(length: int) -> int:
    """Widest window in which any two sequences of ``length`` still overlap."""
    return 2 * length - 1


def resolve_window(width: int | None, length: int) -> int:
    """Return ``width`` if it lies in [N, 2N-1], otherwise the default 2N-1."""
    default = max_width(length)
    if width is None:
        return default
    if width < length or width > default:
        logger = logging.getLogger(__name__)
        logger.info(f"Window width {width} outside [{length}, {default}], using {default}")
        return default
    return int(width)
