#!/usr/bin/env python

"""Quality model: per-base Phred scores to call probabilities.

All reads merged into one Unique contribute one quality string each.
These are reduced to a single per-position median score, from which
the probability that each base call is correct is derived.
"""

from typing import Sequence
import numpy as np
from radtags.core.utils import QUAL_OFFSET


def phred_scores(qualities: Sequence[str]) -> np.ndarray:
    """Return an int array (nreads, length) of Phred+33 decoded scores."""
    arr = np.array(
        [np.frombuffer(qual.encode(), dtype=np.uint8) for qual in qualities],
        dtype=np.int64,
    )
    return arr - QUAL_OFFSET


def median_scores(scores: np.ndarray) -> np.ndarray:
    """Return the lower median score at each position.

    Scores at each position are sorted ascending and the element at
    index (n - 1) // 2 is selected, so for two reads the lower score
    is used rather than their mean.

    >>> median_scores(np.array([[10], [20], [30]]))
    >>> # array([20])
    >>> median_scores(np.array([[15], [25]]))
    >>> # array([15])
    """
    scores = np.sort(np.atleast_2d(scores), axis=0)
    return scores[(scores.shape[0] - 1) // 2]


def call_probabilities(median: np.ndarray) -> np.ndarray:
    """Return the probability that each base call is correct."""
    return 1.0 - np.power(10.0, -median / 10.0)


def high_quality_positions(median: np.ndarray) -> int:
    """Return the number of positions with a median score above zero."""
    return int(np.count_nonzero(median > 0))


def quality_string(scores: Sequence[int]) -> str:
    """Return Phred+33 characters for integer scores."""
    return "".join(chr(int(i) + QUAL_OFFSET) for i in scores)
