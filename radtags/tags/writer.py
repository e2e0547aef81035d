#!/usr/bin/env python

r"""Write Tags to a plain text tags file.

Format
------
For each tag a header line followed by one tab-indented line per
fragment (mate sequence), and a blank line after each cluster that
produced at least one tag:

>>> TGCAGGCACC... HHHHHHHHHH... 3 1
>>> \tATCAGGTGTC... 3
>>>
"""

from typing import Iterable
from pathlib import Path
from loguru import logger

from radtags.tags.quality import quality_string
from radtags.tags.variants import Tag

logger = logger.bind(name="radtags")


def format_tag(tag: Tag) -> str:
    """Return a tag and its fragments as lines of text.

    The empty mate sequence of single-end data counts as a fragment
    but is not written as a line.
    """
    lines = [f"{tag.seq} {quality_string(tag.quality)} {tag.read_count} {tag.fragment_count}"]
    for mate in sorted(tag.fragments):
        if mate:
            lines.append(f"\t{mate} {tag.fragments[mate]}")
    return "\n".join(lines) + "\n"


class TagWriter:
    """Context manager writing tags to a tmp file renamed on success.

    If the context exits on an exception the tmp file is removed, so
    that a file at `path` is always a complete result.

    Example
    -------
    >>> with TagWriter("/tmp/1A_0.tags") as writer:
    >>>     writer.write_cluster(tags)
    """
    def __init__(self, path: Path):
        self.path = Path(path)
        self.tmpfile = self.path.with_name(self.path.name + ".tmp")
        self.handle = None
        self.ntags = 0
        self.nclusters = 0

    def __enter__(self):
        self.handle = open(self.tmpfile, 'w', encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.handle.close()
        if exc_type is not None:
            self.tmpfile.unlink(missing_ok=True)
            logger.debug(f"removed incomplete output {self.tmpfile}")
            return False
        self.tmpfile.replace(self.path)
        return False

    def write_cluster(self, tags: Iterable[Tag]) -> int:
        """Write the tags of one cluster and a blank separator line."""
        ntags = 0
        for tag in tags:
            self.handle.write(format_tag(tag))
            ntags += 1
        if ntags:
            self.handle.write("\n")
            self.nclusters += 1
            self.ntags += ntags
        return ntags
