#!/usr/bin/env python

"""Aggregate a sorted stream of reads into weighted Unique records.

Reads are expected one per line as `r1seq r1qual [r2seq r2qual]` and
must be sorted by r1seq. Consecutive reads sharing an identical r1seq
are merged into a single Unique, so only the reads of the current run
are ever held in memory. Sortedness is a precondition that is not
checked here: unsorted input silently splits a sequence into several
Uniques.
"""

from typing import Dict, Iterable, Iterator, List, Optional
from dataclasses import dataclass, field
from loguru import logger
import numpy as np

from radtags.core.utils import BASES
from radtags.core.exceptions import ReadFormatError, ReadLengthError
from radtags.tags.quality import (
    phred_scores,
    median_scores,
    call_probabilities,
    high_quality_positions,
)

logger = logger.bind(name="radtags")
ALPHABET = frozenset(BASES)


@dataclass
class Read:
    """One (possibly paired) read parsed from a reads file line."""
    r1seq: str
    r1qual: str
    r2seq: str = ""
    r2qual: str = ""


@dataclass
class Unique:
    """All reads sharing one identical primary sequence.

    While reads are being added `qualities` holds one raw quality
    string per read. `finalize` reduces it to the per-position median
    score array and fills `probabilities`.
    """
    seq: str
    count: int = 0
    qualities: List[str] | np.ndarray = field(default_factory=list)
    """: raw quality strings, then per-position median scores."""
    probabilities: Optional[np.ndarray] = None
    """: per-position probability that the base call is correct."""
    mates: Dict[str, List[str]] = field(default_factory=dict)
    """: map of mate sequence to the mate quality strings observed."""

    def add(self, read: Read) -> None:
        """Merge a read with the same r1seq into this Unique."""
        self.count += 1
        self.qualities.append(read.r1qual)
        self.mates.setdefault(read.r2seq, []).append(read.r2qual)

    def finalize(self) -> None:
        """Reduce qualities to medians and derive call probabilities."""
        self.qualities = median_scores(phred_scores(self.qualities))
        self.probabilities = call_probabilities(self.qualities)

    @property
    def confident_positions(self) -> int:
        return high_quality_positions(self.qualities)


def parse_read(line: str) -> Read:
    """Return a Read from a whitespace delimited reads file line."""
    fields = line.split()
    if len(fields) not in (2, 4):
        raise ReadFormatError(
            f"expected 2 or 4 fields in reads line, found {len(fields)}: {line.strip()}")
    read = Read(*fields)
    if len(read.r1seq) != len(read.r1qual) or len(read.r2seq) != len(read.r2qual):
        raise ReadFormatError(
            f"sequence and quality lengths differ in reads line: {line.strip()}")
    if not ALPHABET.issuperset(read.r1seq):
        raise ReadFormatError(
            f"unexpected characters in read sequence: {read.r1seq}")
    return read


@dataclass
class ReadStream:
    """Iterable of Reads parsed lazily from reads file lines.

    The first read sets the read length for the whole sample. Later
    reads of any other length cannot be compared position by position
    and are skipped.
    """
    lines: Iterable[str]
    cluster_distance: int
    read_length: int = 0
    nreads: int = 0
    nskipped: int = 0

    def __iter__(self) -> Iterator[Read]:
        for line in self.lines:
            if not line.strip():
                continue
            read = parse_read(line)

            # the first read sets the read length
            if not self.read_length:
                self._check_first_read(read)
                self.read_length = len(read.r1seq)

            if len(read.r1seq) != self.read_length:
                self.nskipped += 1
                continue
            self.nreads += 1
            yield read

    def _check_first_read(self, read: Read) -> None:
        """Raise ReadLengthError if no unique could ever be accepted."""
        if len(read.r1seq) <= 2 * self.cluster_distance:
            raise ReadLengthError(
                f"first read length ({len(read.r1seq)}) must be greater than "
                f"2 x cluster_distance ({2 * self.cluster_distance}): {read.r1seq}")


@dataclass
class UniqueAggregator:
    """Iterable of accepted Uniques built from a sorted Read iterable.

    A finished Unique is accepted only if it has more high quality
    positions than 2 x cluster_distance. Rejected Uniques are counted
    and aggregation simply continues with the next run of reads.
    """
    reads: Iterable[Read]
    cluster_distance: int
    nuniques: int = 0
    nrejected: int = 0
    nreads_rejected: int = 0

    def __iter__(self) -> Iterator[Unique]:
        unique = None
        for read in self.reads:
            if unique is not None and read.r1seq == unique.seq:
                unique.add(read)
                continue

            # sequence changed: finish the current run, start a new one
            if unique is not None and self._accept(unique):
                yield unique
            unique = Unique(read.r1seq)
            unique.add(read)

        if unique is not None and self._accept(unique):
            yield unique

    def _accept(self, unique: Unique) -> bool:
        unique.finalize()
        if unique.confident_positions > 2 * self.cluster_distance:
            self.nuniques += 1
            return True
        self.nrejected += 1
        self.nreads_rejected += unique.count
        logger.trace(f"rejected low quality unique {unique.seq} ({unique.count} reads)")
        return False


def iter_uniques(reads: Iterable[Read], cluster_distance: int) -> Iterator[Unique]:
    """Generator of accepted Uniques from a sorted Read iterable."""
    yield from UniqueAggregator(reads, cluster_distance)
