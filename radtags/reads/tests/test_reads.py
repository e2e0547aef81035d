#!/usr/bin/env python

"""Unittests for loading fastq data to reads files and sorting them.

- malformed records and out-of-range qualities are invalid
- Illumina 1.3+ qualities converted to Sanger
- R1 and R2 names must match except for their final character
- reads files sorted by r1seq across several chunks
"""

import io
import gzip
import tempfile
import unittest
from pathlib import Path

from radtags.reads.fastq import (
    ILLUMINA_RANGE,
    load_fastq_pair,
    load_fastq_record,
    write_reads_file,
)
from radtags.reads.sort import sort_key, sort_reads_file


def fastq(*records):
    """Return fastq text from (name, seq, qual) tuples."""
    return "".join(f"@{n}\n{s}\n+\n{q}\n" for n, s, q in records)


class TestFastqRecord(unittest.TestCase):

    def test_valid_record(self):
        handle = io.StringIO(fastq(("r1/1 extra", "ACGTN", "IIII#")))
        rec = load_fastq_record(handle)
        self.assertEqual(rec.name, "r1/1")
        self.assertEqual(rec.seq, "ACGTN")
        self.assertEqual(rec.qual, "IIII#")
        self.assertTrue(rec.valid)
        self.assertIsNone(load_fastq_record(handle))

    def test_bad_base_invalid(self):
        rec = load_fastq_record(io.StringIO(fastq(("r1", "ACGX", "IIII"))))
        self.assertFalse(rec.valid)

    def test_bad_header_invalid(self):
        rec = load_fastq_record(io.StringIO("r1\nACGT\n+\nIIII\n"))
        self.assertFalse(rec.valid)

    def test_quality_out_of_range_invalid(self):
        text = fastq(("r1", "ACGT", "II5I"))
        rec = load_fastq_record(io.StringIO(text), qual_low_char="@")
        self.assertFalse(rec.valid)

    def test_illumina_to_sanger(self):
        text = fastq(("r1", "ACGT", "hh@@"))
        rec = load_fastq_record(
            io.StringIO(text), *ILLUMINA_RANGE, illumina=True)
        self.assertTrue(rec.valid)
        # Phred+64 '@' is Q0
        self.assertEqual(rec.qual, "II!!")

    def test_truncated_record_is_end(self):
        self.assertIsNone(load_fastq_record(io.StringIO("@r1\nACGT\n")))


class TestFastqPair(unittest.TestCase):

    def test_paired_names_match(self):
        pair = load_fastq_pair(
            io.StringIO(fastq(("r1/1", "ACGT", "IIII"))),
            io.StringIO(fastq(("r1/2", "GGCC", "HHHH"))),
        )
        self.assertTrue(pair.valid)
        self.assertEqual(pair.read.r2seq, "GGCC")

    def test_paired_names_mismatch(self):
        pair = load_fastq_pair(
            io.StringIO(fastq(("r1/1", "ACGT", "IIII"))),
            io.StringIO(fastq(("r2/2", "GGCC", "HHHH"))),
        )
        self.assertFalse(pair.valid)

    def test_single_end(self):
        pair = load_fastq_pair(io.StringIO(fastq(("r1", "ACGT", "IIII"))))
        self.assertTrue(pair.valid)
        self.assertEqual(pair.read.r2seq, "")


class TestReadsFile(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.testdir = Path(self.tmpdir.name)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_write_reads_file_paired_gz(self):
        fastq1 = self.testdir / "A_R1.fastq.gz"
        fastq2 = self.testdir / "A_R2.fastq"
        with gzip.open(fastq1, 'wt') as out:
            out.write(fastq(("a/1", "ACGT", "IIII"), ("b/1", "ACXT", "IIII"), ("c/1", "TTTT", "IIII")))
        fastq2.write_text(fastq(("a/2", "GGGG", "HHHH"), ("b/2", "CCCC", "HHHH"), ("c/2", "AAAA", "HHHH")))
        outfile = self.testdir / "A.reads"
        nvalid, ninvalid = write_reads_file(fastq1, fastq2, outfile)
        self.assertEqual((nvalid, ninvalid), (2, 1))
        self.assertEqual(
            outfile.read_text(),
            "ACGT IIII GGGG HHHH\nTTTT IIII AAAA HHHH\n",
        )

    def test_write_reads_file_single_end(self):
        fastq1 = self.testdir / "A_R1.fastq"
        fastq1.write_text(fastq(("a", "ACGT", "IIII")))
        outfile = self.testdir / "A.reads"
        self.assertEqual(write_reads_file(fastq1, None, outfile), (1, 0))
        self.assertEqual(outfile.read_text(), "ACGT IIII\n")

    def test_sort_key(self):
        self.assertEqual(sort_key("ACGTT IIIII\n"), "ACGTT")
        self.assertEqual(sort_key("ACGTT IIIII\n", sort_start=3), "GTT")

    def test_sort_in_chunks(self):
        lines = ["TTTT IIII\n", "ACGT IIII\n", "", "GGGG IIII\n", "AAAA IIII\n", "CCCC IIII"]
        path = self.testdir / "A.reads"
        path.write_text("\n".join(i.rstrip("\n") for i in lines if i) + "\n\n")
        sort_reads_file(path, chunksize=2)
        self.assertEqual(
            path.read_text(),
            "AAAA IIII\nACGT IIII\nCCCC IIII\nGGGG IIII\nTTTT IIII\n",
        )
        self.assertFalse(path.with_name("A.reads.sort").exists())

    def test_sort_from_start(self):
        path = self.testdir / "A.reads"
        path.write_text("AATT IIII\nCCAA IIII\n")
        sort_reads_file(path, sort_start=3)
        self.assertEqual(path.read_text(), "CCAA IIII\nAATT IIII\n")


if __name__ == "__main__":
    unittest.main()
