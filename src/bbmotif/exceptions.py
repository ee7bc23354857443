"""
Custom exceptions for sequence loading and search set-up.
Search itself never raises; "no solution below this node" is a plain ``None``.
"""

from __future__ import annotations


class InvalidSymbolError(ValueError):
    """Raised when a character outside the nucleotide alphabet is encoded."""

    def __init__(self, char: str, position: int | None = None):
        self.char = char
        self.position = position
        where = "" if position is None else f" at position {position}"
        super().__init__(f"Invalid character in sequence: {char!r}{where}")


class LengthMismatchError(ValueError):
    """Raised when sequences of different lengths are combined into one search."""


class SearchDepthError(ValueError):
    """Raised when a search tree would be deeper than the allowed recursion depth."""


__all__ = ["InvalidSymbolError", "LengthMismatchError", "SearchDepthError"]
