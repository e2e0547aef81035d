#!/usr/bin/env python

"""Call alleles (tags) from a closed cluster of Uniques.

Substeps:
1. Consensus quality of every base at every position of the cluster.
2. Greedy allele seeds and a compatibility map of members to seeds.
3. Alleles built from members compatible with exactly one seed.
4. Alleles filtered by read count.
5. Mate sequences (fragments) of each allele deduplicated.
6. Alleles filtered by fragment count and returned as Tags.

Two bases only conflict where both are well supported, i.e., their
consensus quality reaches `quality_threshold`. A difference in a
weakly supported base is treated as a sequencing error and does not
split an allele.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple
from dataclasses import dataclass, field
from loguru import logger
import numpy as np

from radtags.core.utils import BASE_INDEX, hamming, round_half_away
from radtags.tags.uniques import Unique
from radtags.tags.clusters import Cluster

logger = logger.bind(name="radtags")


@dataclass
class Fragment:
    """A group of reads sharing a mate sequence within one allele."""
    count: int
    """: number of reads supporting this mate sequence."""
    quality_sum: np.ndarray
    """: per-position sum of count x median primary read quality."""

    def merge(self, other: "Fragment") -> None:
        self.count += other.count
        self.quality_sum = self.quality_sum + other.quality_sum


@dataclass
class Tag:
    """A candidate marker sequence called for one sample."""
    seq: str
    quality: np.ndarray
    read_count: int
    fragment_count: int
    fragments: Dict[str, int] = field(default_factory=dict)
    """: map of surviving mate sequence to its merged read count."""


@dataclass
class Allele:
    """Reads assigned to one allele seed, before filtering."""
    seq: str
    read_count: int = 0
    fragments: Dict[str, Fragment] = field(default_factory=dict)

    def add(self, unique: Unique) -> None:
        """Add the reads and mate groups of an unambiguous member."""
        self.read_count += unique.count
        for mate, quals in unique.mates.items():
            nreads = len(quals)
            quality_sum = nreads * np.asarray(unique.qualities, dtype=np.int64)
            if mate in self.fragments:
                self.fragments[mate].merge(Fragment(nreads, quality_sum))
            else:
                self.fragments[mate] = Fragment(nreads, quality_sum)

    def to_tag(self, fragments: Dict[str, Fragment]) -> Tag:
        """Return a Tag with quality averaged over retained fragments."""
        total = sum(i.quality_sum for i in fragments.values())
        nreads = sum(i.count for i in fragments.values())
        quality = round_half_away(total / nreads)
        return Tag(
            seq=self.seq,
            quality=quality,
            read_count=self.read_count,
            fragment_count=len(fragments),
            fragments={mate: frag.count for mate, frag in fragments.items()},
        )


@dataclass
class CallResult:
    """Tags called from one cluster and counts of what was filtered."""
    tags: List[Tag] = field(default_factory=list)
    nambiguous: int = 0
    nfiltered_reads: int = 0
    nfiltered_fragments: int = 0


def base_indices(seq: str) -> np.ndarray:
    """Return the consensus column index of each base in seq."""
    return np.array([BASE_INDEX[i] for i in seq], dtype=np.int64)


def consensus_qualities(uniques: Iterable[Unique], read_length: int) -> np.ndarray:
    """Return an int array (read_length, 5) of consensus base qualities.

    For each position and base the read-weighted mean median quality of
    the uniques with that base. The mean only counts reads of uniques
    with a quality above zero at that position, and is set to zero
    unless it is supported by more than one read, so that a singleton
    cannot make a base look confident.
    """
    weighted = np.zeros((read_length, len(BASE_INDEX)), dtype=np.int64)
    support = np.zeros((read_length, len(BASE_INDEX)), dtype=np.int64)
    positions = np.arange(read_length)
    for unique in uniques:
        bidx = base_indices(unique.seq[:read_length])
        quals = np.asarray(unique.qualities[:read_length], dtype=np.int64)
        weighted[positions, bidx] += unique.count * quals
        support[positions, bidx] += unique.count * (quals > 0)

    consensus = np.zeros(weighted.shape, dtype=np.int64)
    mask = support > 1
    consensus[mask] = weighted[mask] // support[mask]
    return consensus


def is_compatible(
    seq1: str,
    seq2: str,
    consensus: np.ndarray,
    quality_threshold: int,
) -> bool:
    """Return False if the sequences confidently disagree at any site.

    A site disagrees confidently when the bases differ and both have
    a consensus quality of at least quality_threshold.
    """
    idx1 = base_indices(seq1)
    idx2 = base_indices(seq2)
    positions = np.arange(idx1.size)
    conf1 = consensus[positions, idx1] >= quality_threshold
    conf2 = consensus[positions, idx2] >= quality_threshold
    return not np.any(conf1 & conf2 & (idx1 != idx2))


def order_uniques(uniques: Iterable[Unique]) -> List[Unique]:
    """Return uniques by descending count, ties by sequence."""
    return sorted(uniques, key=lambda x: (-x.count, x.seq))


def compatibility_map(
    uniques: Iterable[Unique],
    consensus: np.ndarray,
    quality_threshold: int,
) -> Dict[str, Set[str]]:
    """Return {sequence: set of compatible seed sequences} for members.

    Uniques are visited by descending count and a unique becomes an
    allele seed if it is compatible with none of the seeds found so
    far. Every unique is then mapped to all seeds it is compatible
    with; a seed always maps to itself alone.
    """
    ordered = order_uniques(uniques)
    seeds = []
    for unique in ordered:
        if not any(
            is_compatible(unique.seq, seed.seq, consensus, quality_threshold)
            for seed in seeds
        ):
            seeds.append(unique)

    compat = {}
    for unique in ordered:
        compat[unique.seq] = {
            seed.seq for seed in seeds
            if is_compatible(unique.seq, seed.seq, consensus, quality_threshold)
        }
    return compat


def call_alleles(
    uniques: Iterable[Unique],
    compat: Dict[str, Set[str]],
) -> Tuple[Dict[str, Allele], int]:
    """Return ({seed: Allele}, n ambiguous) built from the members.

    Members compatible with more than one seed are ambiguous and do
    not contribute to any allele.
    """
    seeds = sorted(set().union(*compat.values()))
    alleles = {seed: Allele(seed) for seed in seeds}
    nambiguous = 0
    for unique in order_uniques(uniques):
        matches = compat[unique.seq]
        if len(matches) != 1:
            nambiguous += 1
            continue
        alleles[next(iter(matches))].add(unique)
    return alleles, nambiguous


def merge_fragments(fragments: Dict[str, Fragment], read_length: int) -> Dict[str, Fragment]:
    """Return mate groups with presumed PCR duplicates merged.

    Mate sequences containing an N are dropped. The rest are sorted
    and scanned with an anchor and offset: each sequence within
    read_length / 4 mismatches of the anchor is merged into it, and
    the first that is not becomes the next anchor. The input dict is
    not modified, but its Fragments are.
    """
    keys = sorted(i for i in fragments if "N" not in i)
    merged = {key: fragments[key] for key in keys}
    anchor = 0
    offset = 1
    while anchor + offset < len(keys):
        akey = keys[anchor]
        okey = keys[anchor + offset]
        if hamming(akey, okey) < read_length / 4:
            merged[akey].merge(merged.pop(okey))
            offset += 1
        else:
            anchor += offset
            offset = 1
    return merged


def call_tags(
    cluster: Cluster,
    quality_threshold: int,
    read_threshold: int,
    read_length: Optional[int] = None,
) -> CallResult:
    """Return the Tags of all alleles of a cluster that pass filters.

    Tags are returned in ascending sequence order.
    """
    uniques = cluster.uniques
    if read_length is None:
        read_length = len(uniques[0].seq)
    consensus = consensus_qualities(uniques, read_length)
    compat = compatibility_map(uniques, consensus, quality_threshold)
    alleles, nambiguous = call_alleles(uniques, compat)
    result = CallResult(nambiguous=nambiguous)

    for seed in sorted(alleles):
        allele = alleles[seed]
        if allele.read_count < read_threshold:
            result.nfiltered_reads += 1
            continue
        fragments = merge_fragments(allele.fragments, read_length)
        if not fragments:
            result.nfiltered_fragments += 1
            continue
        result.tags.append(allele.to_tag(fragments))

    if nambiguous:
        logger.trace(f"{nambiguous} ambiguous uniques in cluster of {len(cluster)}")
    return result
