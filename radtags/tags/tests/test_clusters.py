#!/usr/bin/env python

"""Unittests for the quality-weighted distance and cluster builder.

- distance is symmetric and zero for identical uniques
- low quality mismatches round down to zero distance
- no confidently comparable positions gives the max distance
- cluster_distance=0 splits on one confident mismatch
- canonical is the heaviest unique, ties to the smaller sequence
- the open cluster is emitted at the end of the stream
"""

import unittest

from radtags.tags.uniques import Read, Unique
from radtags.tags.clusters import Cluster, ClusterBuilder, distance, iter_clusters

SEQ = "TGCAGGCACCAATGATGGATTTCGCTTGCATTACG"


def make_unique(seq: str, count: int = 1, qual: str = None) -> Unique:
    """Return a finalized Unique of count identical reads."""
    qual = qual if qual is not None else "I" * len(seq)
    unique = Unique(seq)
    for _ in range(count):
        unique.add(Read(seq, qual))
    unique.finalize()
    return unique


def mutate(seq: str, pos: int, base: str) -> str:
    return seq[:pos] + base + seq[pos + 1:]


class TestDistance(unittest.TestCase):

    def test_identical_is_zero(self):
        uniq1 = make_unique(SEQ, 3)
        uniq2 = make_unique(SEQ, 1, "5" * len(SEQ))
        self.assertEqual(distance(uniq1, uniq2, len(SEQ)), 0)
        self.assertEqual(distance(uniq1, uniq1, len(SEQ)), 0)

    def test_symmetric(self):
        qual = "I5+!" * (len(SEQ) // 4) + "I" * (len(SEQ) % 4)
        uniq1 = make_unique(SEQ, 2, qual)
        other = mutate(mutate(SEQ, 0, "A"), 9, "G")
        uniq2 = make_unique(other, 5, qual[::-1])
        self.assertEqual(
            distance(uniq1, uniq2, len(SEQ)),
            distance(uniq2, uniq1, len(SEQ)),
        )

    def test_one_confident_mismatch(self):
        uniq1 = make_unique(SEQ)
        uniq2 = make_unique(mutate(SEQ, 5, "T"))
        # weighted mismatch ~0.9998 rounds to 1, rescaled by L / L.
        self.assertAlmostEqual(distance(uniq1, uniq2, len(SEQ)), 1.0)

    def test_low_quality_mismatch_rounds_to_zero(self):
        qual = "I" * 5 + "$" + "I" * (len(SEQ) - 6)
        uniq1 = make_unique(SEQ, 1, qual)
        uniq2 = make_unique(mutate(SEQ, 5, "T"), 1, qual)
        # q=3 at the mismatch: p = (1 - 10^-0.3)^2 ~ 0.25
        self.assertEqual(distance(uniq1, uniq2, len(SEQ)), 0)

    def test_rescaled_by_confident_positions(self):
        # half of the positions cannot be compared
        half = len(SEQ) // 2
        qual = "I" * half + "!" * (len(SEQ) - half)
        seq2 = mutate(mutate(SEQ, 0, "A"), 1, "A")
        uniq1 = make_unique(SEQ, 1, qual)
        uniq2 = make_unique(seq2, 1, qual)
        self.assertAlmostEqual(
            distance(uniq1, uniq2, len(SEQ)), 2 / half * len(SEQ))

    def test_nothing_comparable_is_max(self):
        uniq1 = make_unique(SEQ, 1, "!" * len(SEQ))
        uniq2 = make_unique(SEQ, 1, "I" * len(SEQ))
        self.assertEqual(distance(uniq1, uniq2, len(SEQ)), len(SEQ))


class TestClusterBuilder(unittest.TestCase):

    def test_zero_distance_splits_on_mismatch(self):
        uniques = [make_unique(SEQ), make_unique(mutate(SEQ, 33, "T"))]
        clusters = list(iter_clusters(uniques, cluster_distance=0))
        self.assertEqual([len(i) for i in clusters], [1, 1])

    def test_within_distance_joins(self):
        uniques = [
            make_unique(SEQ, 2),
            make_unique(mutate(SEQ, 33, "T"), 5),
            make_unique(mutate(mutate(SEQ, 33, "T"), 34, "A"), 1),
        ]
        clusters = list(iter_clusters(uniques, cluster_distance=1))
        self.assertEqual(len(clusters), 1)
        self.assertEqual(clusters[0].nreads, 8)

    def test_canonical_is_heaviest(self):
        builder = ClusterBuilder(cluster_distance=3)
        first = make_unique(SEQ, 2)
        heavy = make_unique(mutate(SEQ, 33, "T"), 5)
        self.assertIsNone(builder.add(first))
        self.assertIsNone(builder.add(heavy))
        self.assertIs(builder.cluster.canonical, heavy)
        self.assertEqual(builder.read_length, len(SEQ))

    def test_canonical_tie_goes_to_smaller_sequence(self):
        cluster = Cluster()
        larger = make_unique(mutate(SEQ, 33, "T"), 2)
        smaller = make_unique(mutate(SEQ, 33, "A"), 2)
        cluster.add(larger)
        cluster.add(smaller)
        self.assertIs(cluster.canonical, smaller)
        cluster.add(make_unique(mutate(SEQ, 33, "G"), 2))
        self.assertIs(cluster.canonical, smaller)

    def test_distance_measured_to_canonical(self):
        # the third unique is 2 from the first but 1 from the canonical
        seq2 = mutate(SEQ, 33, "T")
        seq3 = mutate(seq2, 34, "A")
        builder = ClusterBuilder(cluster_distance=1)
        builder.add(make_unique(SEQ, 1))
        builder.add(make_unique(seq2, 4))
        self.assertIsNone(builder.add(make_unique(seq3, 1)))
        self.assertEqual(len(builder.cluster), 3)

    def test_close_emits_open_cluster(self):
        builder = ClusterBuilder(cluster_distance=1)
        self.assertIsNone(builder.close())
        builder.add(make_unique(SEQ))
        closed = builder.add(make_unique("A" * len(SEQ)))
        self.assertEqual(len(closed), 1)
        last = builder.close()
        self.assertEqual(last.uniques[0].seq, "A" * len(SEQ))
        self.assertIsNone(builder.cluster)


if __name__ == "__main__":
    unittest.main()
