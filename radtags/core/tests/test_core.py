#!/usr/bin/env python

"""Unittests for shared utilities and the Params schema.

- halves rounded away from zero
- hamming distance over unequal lengths
- log format shows a sample column only for bound records
- the default outpath is resolved like an entered one
- invalid params raise ValidationError
"""

import tempfile
import unittest
from pathlib import Path
import numpy as np
from pydantic import ValidationError

from radtags.core.utils import round_half_away, hamming, sample_name
from radtags.core.logger_setup import formatter
from radtags.schema import Params, TagStats, SampleResult


class TestUtils(unittest.TestCase):

    def test_round_half_away(self):
        self.assertEqual(round_half_away(2.5), 3)
        self.assertEqual(round_half_away(0.5), 1)
        self.assertEqual(round_half_away(1.4999), 1)
        self.assertEqual(round_half_away(-2.5), -3)
        self.assertEqual(round_half_away(np.float64(3.5)), 4)

    def test_round_half_away_array(self):
        values = np.array([36.5, 36.49, 0.0, 110 / 3])
        result = round_half_away(values)
        self.assertEqual(result.dtype, np.int64)
        self.assertEqual(result.tolist(), [37, 36, 0, 37])

    def test_hamming(self):
        self.assertEqual(hamming("ACGT", "ACGT"), 0)
        self.assertEqual(hamming("ACGT", "ACCA"), 2)
        self.assertEqual(hamming("ACGT", "AC"), 2)
        self.assertEqual(hamming("", "ACG"), 3)

    def test_sample_name(self):
        self.assertEqual(sample_name(Path("/data/1A_0.reads.gz")), "1A_0")
        self.assertEqual(sample_name("1A_0.reads"), "1A_0")

    def test_formatter_sample_column(self):
        bound = formatter({"extra": {"name": "radtags", "sample": "1A_0"}})
        unbound = formatter({"extra": {"name": "radtags"}})
        self.assertIn("{extra[sample]:<12}", bound)
        self.assertNotIn("extra[sample]", unbound)
        self.assertTrue(unbound.endswith("{message}\n"))


class TestParams(unittest.TestCase):

    def test_defaults(self):
        params = Params()
        self.assertEqual(params.cluster_distance, 5)
        self.assertEqual(params.quality_threshold, 20)
        self.assertEqual(params.read_threshold, 2)

    def test_default_outpath_resolved(self):
        params = Params()
        self.assertTrue(params.outpath.is_absolute())
        self.assertEqual(params.outpath, Path("./tags").resolve())
        self.assertIn(str(Path("./tags").resolve()), params.model_dump_json())

    def test_invalid_values(self):
        with self.assertRaises(ValidationError):
            Params(cluster_distance=0)
        with self.assertRaises(ValidationError):
            Params(quality_threshold=-1)
        with self.assertRaises(ValidationError):
            Params(outpath="/tmp/my tags")
        params = Params()
        with self.assertRaises(ValidationError):
            params.read_threshold = 0

    def test_json_round_trip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            handle = Path(tmpdir) / "params.json"
            params = Params(cluster_distance=3, outpath=tmpdir)
            params.save_json(handle)
            self.assertEqual(Params.load_json(handle), params)

    def test_sample_result_failed(self):
        result = SampleResult(name="A", reads_path="A.reads")
        self.assertFalse(result.failed)
        result.error = "ReadLengthError: too short"
        self.assertTrue(result.failed)
        self.assertEqual(TagStats().reads, 0)


if __name__ == "__main__":
    unittest.main()
