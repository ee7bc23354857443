"""Nucleotide symbol codec.

Symbols are 1-based indices into ``ALPHABET`` (A=1, C=2, G=3, T=4) so that the
complement of index ``k`` is ``5 - k``. Index 0 is reserved for "unassigned"
positions in search state and never occurs inside an encoded sequence.
"""

from __future__ import annotations

import numpy as np

from bbmotif.exceptions import InvalidSymbolError

ALPHABET = ("A", "C", "G", "T")
UNASSIGNED = 0
PLACEHOLDER = " "

_INDEX = {char: i + 1 for i, char in enumerate(ALPHABET)}


def index_of(char: str, case_sensitive: bool = True) -> int:
    """Return the symbol index of ``char``."""
    key = char if case_sensitive else char.upper()
    try:
        return _INDEX[key]
    except KeyError:
        raise InvalidSymbolError(char) from None


def char_of(index: int) -> str:
    """Return the character for a symbol index, or a blank when out of range."""
    if 0 < index <= len(ALPHABET):
        return ALPHABET[index - 1]
    return PLACEHOLDER


def complement(index: int) -> int:
    """Watson-Crick complement of a symbol index."""
    return len(ALPHABET) + 1 - index


def encode(text: str, case_sensitive: bool = True) -> np.ndarray:
    """Encode a nucleotide string into an int8 array of symbol indices."""
    symbols = np.empty(len(text), dtype=np.int8)
    for pos, char in enumerate(text):
        try:
            symbols[pos] = index_of(char, case_sensitive)
        except InvalidSymbolError:
            raise InvalidSymbolError(char, pos) from None
    return symbols


def decode(symbols) -> str:
    """Convert symbol indices back to a string; unassigned entries become blanks."""
    return "".join(char_of(int(s)) for s in symbols)


def reverse_complement(symbols: np.ndarray) -> np.ndarray:
    """Return the reverse-complement strand of an encoded sequence."""
    return (len(ALPHABET) + 1 - symbols[::-1]).astype(np.int8)
