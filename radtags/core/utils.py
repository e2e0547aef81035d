#!/usr/bin/env python

"""Globals used commonly.

"""

from pathlib import Path
import numpy as np
from numpy.typing import ArrayLike

# Phred+33 (Sanger) quality encoding.
QUAL_OFFSET = 33

# nucleotide alphabet plus the ambiguous call, in consensus column order.
BASES = "ACGTN"
BASE_INDEX = {base: idx for idx, base in enumerate(BASES)}


def round_half_away(values: ArrayLike) -> np.ndarray:
    """Round to the nearest integers, with halves rounded away from zero.

    Works on scalars and arrays alike and returns an int64 array (0-d
    for a scalar). np.round() and round() round halves to even, e.g.,
    round(2.5) == 2.
    """
    values = np.asarray(values, dtype=np.float64)
    return (np.sign(values) * np.floor(np.abs(values) + 0.5)).astype(np.int64)


def hamming(seq1: str, seq2: str) -> int:
    """Return the number of mismatches between two sequences.

    Sequences of unequal length are compared over their shared prefix
    and every overhanging base counts as a mismatch.
    """
    diffs = sum(i != j for i, j in zip(seq1, seq2))
    return diffs + abs(len(seq1) - len(seq2))


def sample_name(path: Path) -> str:
    """Return a file name with all suffixes removed.

    >>> sample_name(Path("/data/1A_0.reads.gz"))
    >>> # "1A_0"
    """
    path = Path(path)
    suffixes = path.suffixes
    name = path.name
    for suffix in suffixes[::-1]:
        name = name[:-len(suffix)]
    return name or path.name
