#!/usr/bin/env python

"""Call tags for one or more samples from sorted reads files.

Each sample is an independent streaming pipeline:
    reads -> uniques -> clusters -> tags -> tags file

Samples run on separate worker processes. A sample that fails is
reported and recorded in its SampleResult while the others continue,
and its partial tags file is removed.
"""

from typing import Dict, List
import gzip
from pathlib import Path
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field

from loguru import logger
import pandas as pd

from radtags.core.exceptions import RadTagsError
from radtags.core.utils import sample_name
from radtags.core.logger_setup import sample_logger
from radtags.schema import Params, TagStats, SampleResult
from radtags.tags.uniques import ReadStream, UniqueAggregator
from radtags.tags.clusters import iter_clusters
from radtags.tags.variants import call_tags
from radtags.tags.writer import TagWriter

logger = logger.bind(name="radtags")


def tag_sample(
    reads_path: Path,
    tags_path: Path,
    cluster_distance: int,
    quality_threshold: int,
    read_threshold: int,
) -> TagStats:
    """Write tags for one sample from its sorted reads file.

    Runs on a worker process. Errors propagate to the caller, after
    the incomplete tags file has been removed by the TagWriter.
    """
    log = sample_logger(sample_name(tags_path))
    xopen = gzip.open if Path(reads_path).suffix == ".gz" else open
    stats = TagStats()
    log.debug(f"calling tags from {reads_path}")
    with xopen(reads_path, 'rt', encoding="utf-8") as infile, TagWriter(tags_path) as writer:
        reads = ReadStream(infile, cluster_distance)
        uniques = UniqueAggregator(reads, cluster_distance)
        for cluster in iter_clusters(uniques, cluster_distance):
            stats.clusters += 1
            result = call_tags(
                cluster, quality_threshold, read_threshold, reads.read_length)
            log.trace(
                f"cluster {stats.clusters}: {len(cluster)} uniques, "
                f"{cluster.nreads} reads, {len(result.tags)} tags")
            stats.uniques_ambiguous += result.nambiguous
            stats.alleles_filtered_by_reads += result.nfiltered_reads
            stats.alleles_filtered_by_fragments += result.nfiltered_fragments
            stats.fragments += sum(i.fragment_count for i in result.tags)
            writer.write_cluster(result.tags)

    stats.read_length = reads.read_length
    stats.reads = reads.nreads
    stats.reads_skipped_length = reads.nskipped
    stats.uniques = uniques.nuniques
    stats.uniques_rejected = uniques.nrejected
    stats.reads_rejected = uniques.nreads_rejected
    stats.clusters_with_tags = writer.nclusters
    stats.tags = writer.ntags
    if stats.reads_skipped_length:
        log.warning(
            f"{stats.reads_skipped_length} reads skipped with a length "
            f"other than {stats.read_length}")
    log.debug(f"{stats.tags} tags written to {tags_path}")
    return stats


@dataclass
class BuildTags:
    """Run tag clustering on a set of per-sample sorted reads files.

    Example
    -------
    >>> tool = BuildTags(
    >>>     reads_paths="./sorted/*.reads",
    >>>     params=Params(cluster_distance=5, outpath="/tmp/tags"),
    >>> )
    >>> results = tool.run()
    """
    reads_paths: List[Path]
    """: List of paths (glob OK) to sorted reads files, one per sample."""
    params: Params = field(default_factory=Params)
    """: Clustering options and the outpath for tags files."""
    force: bool = False
    """: Allow overwriting existing tags files in outpath."""

    # attrs to be filled.
    _names_to_reads: Dict[str, Path] = field(default_factory=dict)
    """: Dict mapping sample names to their reads file."""
    results: Dict[str, SampleResult] = field(default_factory=dict)
    """: Dict mapping sample names to their SampleResult."""

    def __post_init__(self):
        self._get_reads_paths()
        self._get_outpath()

    def run(self) -> Dict[str, SampleResult]:
        """Run each sample on a separate worker and write stats."""
        self.params.save_json(self.params.outpath / "tags_params.json")
        self._remote_tag_samples()
        self._write_stats_file()
        return self.results

    @property
    def failed(self) -> List[str]:
        return sorted(i for i, j in self.results.items() if j.failed)

    def _get_reads_paths(self) -> None:
        """Expand reads_paths into a {sample name: Path} dict."""
        if isinstance(self.reads_paths, (str, Path)):
            self.reads_paths = [self.reads_paths]
        for path in self.reads_paths:
            path = Path(path).expanduser()
            matches = sorted(path.parent.glob(path.name))
            if not matches:
                msg = f"No reads files match input: {path}"
                logger.error(msg)
                raise RadTagsError(msg)
            for match in matches:
                name = sample_name(match)
                if name in self._names_to_reads:
                    raise RadTagsError(
                        f"Sample name {name} is shared by reads files "
                        f"{self._names_to_reads[name]} and {match}")
                self._names_to_reads[name] = match.resolve()
        logger.debug(f"reads files: {self._names_to_reads}")

    def _get_outpath(self) -> None:
        """Create outpath, refusing to overwrite tags unless forced."""
        self.params.outpath = Path(self.params.outpath).expanduser().resolve()
        self.params.outpath.mkdir(parents=True, exist_ok=True)
        if not self.force:
            existing = [
                i for i in self._names_to_reads
                if (self.params.outpath / f"{i}.tags").exists()
            ]
            if existing:
                raise RadTagsError(
                    f"Tags files exist in {self.params.outpath} for samples "
                    f"{existing}. Use force to overwrite.")

    def _remote_tag_samples(self) -> None:
        """Submit samples to a pool, largest reads files first."""
        names = sorted(
            self._names_to_reads,
            key=lambda x: self._names_to_reads[x].stat().st_size,
            reverse=True,
        )
        logger.info(f"calling tags for {len(names)} samples")
        rasyncs = {}
        with ProcessPoolExecutor(max_workers=self.params.cores) as pool:
            for name in names:
                args = (
                    self._names_to_reads[name],
                    self.params.outpath / f"{name}.tags",
                    self.params.cluster_distance,
                    self.params.quality_threshold,
                    self.params.read_threshold,
                )
                rasyncs[name] = pool.submit(tag_sample, *args)

            # collect results; one failed sample does not stop others.
            for name, rasync in rasyncs.items():
                result = SampleResult(name=name, reads_path=self._names_to_reads[name])
                try:
                    result.stats = rasync.result()
                    result.tags_path = self.params.outpath / f"{name}.tags"
                    logger.info(
                        f"sample {name}: {result.stats.reads} reads, "
                        f"{result.stats.clusters} clusters, {result.stats.tags} tags")
                except Exception as inst:  # pylint: disable=broad-except
                    result.error = f"{type(inst).__name__}: {inst}"
                    logger.error(f"sample {name} failed: {result.error}")
                self.results[name] = result

    def _write_stats_file(self) -> None:
        """Write a table of per-sample stats to outpath/tag_stats.txt."""
        passed = sorted(i for i, j in self.results.items() if not j.failed)
        statsdf = pd.DataFrame(
            index=passed,
            columns=list(TagStats.model_fields),
        )
        for name in passed:
            statsdict = self.results[name].stats.model_dump()
            for key in statsdf.columns:
                statsdf.loc[name, key] = statsdict[key]
        handle = self.params.outpath / "tag_stats.txt"
        with open(handle, 'w', encoding="utf-8") as outfile:
            statsdf.fillna(value=0).to_string(outfile)
        logger.info(f"tag statistics written to {handle}")
        if self.failed:
            logger.error(f"{len(self.failed)} samples failed: {self.failed}")
