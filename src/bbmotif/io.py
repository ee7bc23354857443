from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from bbmotif.exceptions import InvalidSymbolError
from bbmotif.sequence import Sequence


def _make_sequence(name: Optional[str], chunks: List[str], case_sensitive: bool) -> Optional[Sequence]:
    """Encode one FASTA record, or log and skip it when it holds invalid characters."""
    try:
        return Sequence.from_string(name, "".join(chunks), case_sensitive=case_sensitive)
    except InvalidSymbolError as e:
        logger = logging.getLogger(__name__)
        logger.warning(f"Ignored {name}: {e}")
        return None


def read_fasta(path: str | Path, case_sensitive: bool = True) -> List[Sequence]:
    """Read a FASTA file and return the encodable sequences in file order."""
    logger = logging.getLogger(__name__)
    sequences: List[Sequence] = []
    name = None
    chunks: Optional[List[str]] = None

    with open(path, "r") as handle:
        for row, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            if line.startswith(">"):
                if chunks is not None:
                    seq = _make_sequence(name, chunks, case_sensitive)
                    if seq is not None:
                        sequences.append(seq)
                parts = line[1:].split()
                if not parts:
                    logger.warning(f"Ignored record without name at row {row} of {path}")
                    name, chunks = None, None
                    continue
                name = parts[0]
                chunks = []
            elif chunks is not None:
                chunks.append(line)

    if chunks is not None:
        seq = _make_sequence(name, chunks, case_sensitive)
        if seq is not None:
            sequences.append(seq)

    logger.info(f"Read {len(sequences)} sequences from {path}")
    return sequences


def write_fasta(sequences: Iterable[Sequence], path: str | Path) -> None:
    """Write sequences to a FASTA file, one line per sequence."""
    with open(path, "w") as out:
        for seq in sequences:
            out.write(f">{seq.name}\n")
            out.write(f"{seq.symbol_chars()}\n")
