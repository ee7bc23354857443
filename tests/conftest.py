"""
Pytest configuration and common fixtures for bbmotif tests.
"""
import sys
import tempfile
from pathlib import Path

import pytest

from bbmotif.sequence import SequenceSet

# Force testing the installed package, not the local source
project_root = str(Path(__file__).parent.parent.absolute())
if project_root in sys.path:
    sys.path.remove(project_root)

CS7X5 = ["AGCTG", "AGCAG", "CAGCC", "CACAG", "GCAGC", "GATAA", "CAGGC"]
CS5X3 = ["AAG", "GCC", "CGC", "AGC", "GCT"]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def examples_dir():
    """Return path to examples directory."""
    return Path(__file__).parent.parent / "examples"


@pytest.fixture
def seqs_7x5():
    """Seven sequences of length 5."""
    return SequenceSet.from_strings(CS7X5)


@pytest.fixture
def seqs_5x3():
    """Five sequences of length 3."""
    return SequenceSet.from_strings(CS5X3)
