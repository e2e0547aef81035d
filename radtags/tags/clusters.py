#!/usr/bin/env python

"""Streaming cluster builder for sorted Uniques.

Uniques arrive in sorted order, so reads from one locus arrive close
together. A cluster stays open while each incoming Unique is within
`cluster_distance` of the cluster canonical (the heaviest member seen
so far) and is closed as soon as one is not. Only the members of the
open cluster are held in memory.

States
------
EMPTY: no cluster open; the next Unique opens one.
OPEN: a cluster is open and compared against every incoming Unique.
"""

from typing import Iterable, Iterator, List, Optional
from dataclasses import dataclass, field
import numpy as np

from radtags.core.utils import round_half_away
from radtags.tags.uniques import Unique


@dataclass
class Cluster:
    """Uniques believed to originate from one locus."""
    uniques: List[Unique] = field(default_factory=list)
    canonical: Optional[Unique] = None

    def add(self, unique: Unique) -> None:
        """Append a member and replace canonical if it is heavier.

        Ties on count go to the lexicographically smaller sequence.
        """
        self.uniques.append(unique)
        if self.canonical is None:
            self.canonical = unique
        elif unique.count > self.canonical.count or (
            unique.count == self.canonical.count and unique.seq < self.canonical.seq
        ):
            self.canonical = unique

    @property
    def nreads(self) -> int:
        return sum(i.count for i in self.uniques)

    def __len__(self) -> int:
        return len(self.uniques)


def distance(unique1: Unique, unique2: Unique, read_length: int) -> float:
    """Return the quality-weighted distance between two Uniques.

    Each position is weighted by the joint probability that both base
    calls are correct. Positions where this is zero cannot be compared.
    The rounded sum of weighted mismatches, as a fraction of the
    comparable positions, is rescaled to the read length so that it
    can be compared to an integer cluster_distance. If no positions
    are comparable the maximum distance (read_length) is returned.
    """
    prob = unique1.probabilities[:read_length] * unique2.probabilities[:read_length]
    seq1 = np.frombuffer(unique1.seq[:read_length].encode(), dtype=np.uint8)
    seq2 = np.frombuffer(unique2.seq[:read_length].encode(), dtype=np.uint8)
    confident = int(np.count_nonzero(prob > 0))
    if not confident:
        return float(read_length)
    mismatch = int(round_half_away(prob[seq1 != seq2].sum()))
    return mismatch * read_length / confident


@dataclass
class ClusterBuilder:
    """State machine grouping a stream of Uniques into Clusters."""
    cluster_distance: int
    read_length: int = 0
    """: set from the first Unique if not entered."""
    cluster: Optional[Cluster] = None
    """: the open cluster, or None when EMPTY."""

    def add(self, unique: Unique) -> Optional[Cluster]:
        """Add a Unique and return a Cluster if this closed one."""
        # EMPTY -> OPEN
        if self.cluster is None:
            if not self.read_length:
                self.read_length = len(unique.seq)
            self.cluster = Cluster()
            self.cluster.add(unique)
            return None

        # OPEN: extend the cluster or close it and open a new one.
        dist = distance(self.cluster.canonical, unique, self.read_length)
        if dist <= self.cluster_distance:
            self.cluster.add(unique)
            return None
        closed = self.cluster
        self.cluster = Cluster()
        self.cluster.add(unique)
        return closed

    def close(self) -> Optional[Cluster]:
        """Return the open cluster at the end of the stream."""
        closed = self.cluster
        self.cluster = None
        return closed


def iter_clusters(
    uniques: Iterable[Unique],
    cluster_distance: int,
    read_length: int = 0,
) -> Iterator[Cluster]:
    """Generator of closed Clusters from a sorted Unique iterable."""
    builder = ClusterBuilder(cluster_distance, read_length)
    for unique in uniques:
        closed = builder.add(unique)
        if closed is not None:
            yield closed
    closed = builder.close()
    if closed is not None:
        yield closed
