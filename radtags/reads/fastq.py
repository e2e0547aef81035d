#!/usr/bin/env python

"""Load fastq (pairs) of one sample into a reads file.

The reads file has one read (pair) per line as `r1seq r1qual` or
`r1seq r1qual r2seq r2qual`, with Sanger (Phred+33) qualities. It
must be sorted before tags are called, see `radtags.reads.sort`.

Records are validated as they are loaded. A pair is invalid, and is
not written, if either record is malformed, contains bases other
than ACGTN, has quality characters outside the expected range, or if
the R1 and R2 names differ by more than their final character.
"""

from typing import Iterator, Optional, TextIO, Tuple
import io
import gzip
from pathlib import Path
from dataclasses import dataclass
from loguru import logger

from radtags.core.utils import QUAL_OFFSET
from radtags.tags.uniques import Read

logger = logger.bind(name="radtags")

# Illumina 1.3+ (Phred+64) to Sanger. Chars below '@' become '!'.
ILLUMINA_TO_SANGER = {i: max(i - 31, QUAL_OFFSET) for i in range(256)}
SANGER_RANGE = ("!", "~")
ILLUMINA_RANGE = ("@", "~")


@dataclass
class FastqRecord:
    name: str
    seq: str
    qual: str
    valid: bool


@dataclass
class FastqPair:
    read: Read
    r1name: str
    r2name: str
    valid: bool


def load_fastq_record(
    handle: TextIO,
    qual_low_char: str = SANGER_RANGE[0],
    qual_high_char: str = SANGER_RANGE[1],
    illumina: bool = False,
) -> Optional[FastqRecord]:
    """Return the next FastqRecord, or None at the end of the file.

    Qualities are checked against the (low, high) char range before
    Illumina qualities are converted to Sanger.
    """
    lines = [handle.readline() for _ in range(4)]
    if not all(lines):
        return None
    header, seq, sep, qual = (i.rstrip("\r\n") for i in lines)

    valid = True
    if header.startswith("@") and len(header) > 1 and not header[1].isspace():
        name = header[1:].split()[0]
    else:
        name = ""
        valid = False
    if not seq or set(seq) - set("ACGTN"):
        valid = False
    if not sep.startswith("+"):
        valid = False
    if not qual or not all(qual_low_char <= i <= qual_high_char for i in qual):
        valid = False
    if illumina:
        qual = qual.translate(ILLUMINA_TO_SANGER)
    return FastqRecord(name, seq, qual, valid)


def load_fastq_pair(
    handle1: TextIO,
    handle2: Optional[TextIO] = None,
    qual_low_char: str = SANGER_RANGE[0],
    qual_high_char: str = SANGER_RANGE[1],
    illumina: bool = False,
) -> Optional[FastqPair]:
    """Return the next FastqPair, or None at the end of either file.

    Without a second handle the R2 is an empty, always valid record
    so that single-end data loads the same way.
    """
    kwargs = dict(
        qual_low_char=qual_low_char,
        qual_high_char=qual_high_char,
        illumina=illumina,
    )
    rec1 = load_fastq_record(handle1, **kwargs)
    if rec1 is None:
        return None

    if handle2 is not None:
        rec2 = load_fastq_record(handle2, **kwargs)
        if rec2 is None:
            return None
        # names match when the final 1/2 is stripped.
        names_match = rec1.name[:-1] == rec2.name[:-1]
    else:
        rec2 = FastqRecord("", "", "", True)
        names_match = True

    return FastqPair(
        read=Read(rec1.seq, rec1.qual, rec2.seq, rec2.qual),
        r1name=rec1.name,
        r2name=rec2.name,
        valid=rec1.valid and rec2.valid and names_match,
    )


def _open(path: Path) -> TextIO:
    opener = gzip.open if Path(path).suffix == ".gz" else io.open
    return opener(path, 'rt', encoding="utf-8")


def iter_fastq_pairs(
    fastq1: Path,
    fastq2: Optional[Path] = None,
    **kwargs,
) -> Iterator[FastqPair]:
    """Generator of FastqPairs from one or two fastq files (gzip OK)."""
    handle1 = _open(fastq1)
    handle2 = _open(fastq2) if fastq2 else None
    try:
        while 1:
            pair = load_fastq_pair(handle1, handle2, **kwargs)
            if pair is None:
                break
            yield pair
    finally:
        handle1.close()
        if handle2 is not None:
            handle2.close()


def format_read(read: Read) -> str:
    """Return a read as a reads file line."""
    if read.r2seq:
        return f"{read.r1seq} {read.r1qual} {read.r2seq} {read.r2qual}\n"
    return f"{read.r1seq} {read.r1qual}\n"


def write_reads_file(
    fastq1: Path,
    fastq2: Optional[Path],
    outfile: Path,
    **kwargs,
) -> Tuple[int, int]:
    """Write valid pairs to a reads file, return (nvalid, ninvalid)."""
    nvalid = 0
    ninvalid = 0
    with open(outfile, 'w', encoding="utf-8") as out:
        for pair in iter_fastq_pairs(fastq1, fastq2, **kwargs):
            if pair.valid:
                out.write(format_read(pair.read))
                nvalid += 1
            else:
                ninvalid += 1
    if ninvalid:
        logger.warning(f"{ninvalid} invalid read pairs excluded from {outfile}")
    logger.info(f"{nvalid} reads written to {outfile}")
    return nvalid, ninvalid
