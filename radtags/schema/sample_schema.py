#!/usr/bin/env python

"""Serializable schema for per-sample results.

{
    name: '1A_0',
    reads_path: '/data/1A_0.reads',
    tags_path: '/tags/1A_0.tags',
    stats: {
        reads: 19862,
        uniques: 4120,
        ...,
    },
    error: null,
}
"""

from pathlib import Path
from pydantic import BaseModel

__all__ = [
    "TagStats",
    "SampleResult",
]


class TagStats(BaseModel):
    """Results of tag clustering for one sample."""
    read_length: int = 0
    reads: int = 0
    reads_skipped_length: int = 0
    uniques: int = 0
    uniques_rejected: int = 0
    reads_rejected: int = 0
    clusters: int = 0
    clusters_with_tags: int = 0
    uniques_ambiguous: int = 0
    alleles_filtered_by_reads: int = 0
    alleles_filtered_by_fragments: int = 0
    tags: int = 0
    fragments: int = 0


class SampleResult(BaseModel):
    """The outcome of one sample worker, successful or not."""
    name: str
    reads_path: Path
    tags_path: Path | None = None
    stats: TagStats | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def __str__(self):
        return self.model_dump_json(indent=2)
