#!/usr/bin/env python

"""Sort a reads file by its read1 sequences.

Tag clustering requires reads sorted by r1seq so that identical and
similar reads arrive together. Files are sorted in chunks of at most
`chunksize` lines, which are written to tmp files and merged, so that
large files do not need to fit in memory.
"""

from typing import Iterator, List
import heapq
import itertools
import tempfile
from pathlib import Path
from loguru import logger

logger = logger.bind(name="radtags")
CHUNKSIZE = 5_000_000


def sort_key(line: str, sort_start: int = 1) -> str:
    """Return the r1seq of a reads line from (1-based) sort_start."""
    return line.split(" ", 1)[0][sort_start - 1:]


def _write_chunk(lines: List[str], tmpdir: Path, idx: int, sort_start: int) -> Path:
    lines.sort(key=lambda x: (sort_key(x, sort_start), x))
    handle = tmpdir / f"chunk_{idx}.reads"
    with open(handle, 'w', encoding="utf-8") as out:
        out.writelines(lines)
    return handle


def _iter_lines(handle: Path) -> Iterator[str]:
    with open(handle, 'r', encoding="utf-8") as infile:
        yield from infile


def sort_reads_file(path: Path, sort_start: int = 1, chunksize: int = CHUNKSIZE) -> Path:
    """Sort a reads file in place by r1seq and return its path.

    The sorted result is written to a tmp file next to the reads file
    and moved over it only when complete.
    """
    path = Path(path)
    tmpout = path.with_name(path.name + ".sort")
    with tempfile.TemporaryDirectory(dir=path.parent) as tmpdir:
        chunks = []
        with open(path, 'r', encoding="utf-8") as infile:
            lines = (i if i.endswith("\n") else i + "\n" for i in infile if i.strip())
            while 1:
                chunk = list(itertools.islice(lines, chunksize))
                if not chunk:
                    break
                chunks.append(_write_chunk(chunk, Path(tmpdir), len(chunks), sort_start))
        logger.debug(f"sorting {path} in {len(chunks)} chunks")

        merged = heapq.merge(
            *(_iter_lines(i) for i in chunks),
            key=lambda x: (sort_key(x, sort_start), x),
        )
        with open(tmpout, 'w', encoding="utf-8") as out:
            out.writelines(merged)
    tmpout.replace(path)
    logger.info(f"sorted reads file {path}")
    return path
