#!/usr/bin/env python

"""Command line interface.

Examples
--------
>>> radtags fastq -1 1A_0_R1.fastq.gz -2 1A_0_R2.fastq.gz -o 1A_0.reads --sort
>>> radtags sort 1A_0.reads
>>> radtags tags -d ./sorted/*.reads -o ./tags -r 5 -q 20 -t 2 -c 8
"""

import sys
import argparse
from pathlib import Path
from loguru import logger
from pydantic import ValidationError
import radtags

logger = logger.bind(name="radtags")

VERSION = str(radtags.__version__)
HEADER = f"""
-------------------------------------------------------------
 radtags [v.{VERSION}]
 Per-sample clustering of RAD reads into candidate tags
-------------------------------------------------------------\
"""

DESCRIPTION = " radtags command line tool. Select a positional subcommand:"
EPILOG = """\
Note
----
Each subcommand has its own additional help screen, e.g.,:
>>> radtags tags -h

Examples
--------
>>> # fastq: load (paired) fastq files of one sample into a reads file
>>> radtags fastq -1 A_R1.fastq.gz -2 A_R2.fastq.gz -o A.reads --sort
>>> radtags fastq -1 A_R1.fastq -o A.reads --illumina

>>> # sort: sort a reads file by read1 sequence
>>> radtags sort A.reads

>>> # tags: call tags from one or more sorted reads files
>>> radtags tags -d ./sorted/*.reads -o ./tags -c 8
>>> radtags tags -d ./sorted/*.reads -r 3 -q 25 -t 4 --logger DEBUG
>>> radtags tags -d ./sorted/*.reads -j ./tags/tags_params.json -f
"""

FASTQ_EPILOG = """\
Examples
--------
>>> radtags fastq -1 A_R1.fastq.gz -2 A_R2.fastq.gz -o A.reads --sort
>>> radtags fastq -1 A_R1.fastq -o A.reads --illumina
"""

SORT_EPILOG = """\
Examples
--------
>>> radtags sort A.reads
>>> radtags sort A.reads --sort-start 6
"""

TAGS_EPILOG = """\
Examples
--------
>>> radtags tags -d ./sorted/*.reads -o ./tags -c 8
>>> radtags tags -d A.reads B.reads -r 3 -q 25 -t 4
>>> radtags tags -d ./sorted/*.reads -j ./tags/tags_params.json -f
"""


def setup_fastq_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Add `radtags fastq` subcommand parser."""
    fastq = subparsers.add_parser(
        "fastq",
        description=HEADER + "\n" + " radtags fastq: load fastq data to a reads file",
        help="Load fastq (pairs) of one sample into a reads file.",
        epilog=FASTQ_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    fastq.add_argument(
        "-1", "--r1", dest="fastq1", metavar="fastq1", type=Path, required=True,
        help="Path to the R1 fastq file of a sample (gzip OK).",
    )
    fastq.add_argument(
        "-2", "--r2", dest="fastq2", metavar="fastq2", type=Path,
        help="Path to the R2 fastq file of a sample if paired (gzip OK).",
    )
    fastq.add_argument(
        "-o", dest="outfile", metavar="outfile", type=Path, required=True,
        help="Path of the reads file to write.",
    )
    fastq.add_argument(
        "--illumina", action="store_true",
        help="Qualities are Illumina 1.3+ (Phred+64) and are converted to Sanger.",
    )
    fastq.add_argument(
        "--qual-range", type=str, nargs=2, metavar=("LOW", "HIGH"),
        help="Lowest and highest valid quality chars. Default=! ~ (or @ ~ with --illumina).",
    )
    fastq.add_argument(
        "--sort", action="store_true",
        help="Sort the reads file by read1 sequence after writing.",
    )
    fastq.add_argument(
        "--logger", type=str, nargs="*", default=("INFO", None),
        help=(
            "Logging info entered as one value for LOGLEVEL, or two values "
            "for LOGLEVEL LOGFILE; e.g., 'DEBUG' or 'DEBUG radtags.txt.'")
    )


def setup_sort_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Add `radtags sort` subcommand parser."""
    sort = subparsers.add_parser(
        "sort",
        description=HEADER + "\n" + " radtags sort: sort a reads file in place",
        help="Sort a reads file by read1 sequence.",
        epilog=SORT_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sort.add_argument(
        "reads", type=Path, nargs="+",
        help="One or more reads files to sort in place.",
    )
    sort.add_argument(
        "--sort-start", type=int, default=1,
        help="1-based position in read1 to sort from, e.g., to skip a barcode. Default=1.",
    )
    sort.add_argument(
        "--logger", type=str, nargs="*", default=("INFO", None),
        help=(
            "Logging info entered as one value for LOGLEVEL, or two values "
            "for LOGLEVEL LOGFILE; e.g., 'DEBUG' or 'DEBUG radtags.txt.'")
    )


def setup_tags_subparser(subparsers: argparse._SubParsersAction) -> None:
    """Add `radtags tags` subcommand parser."""
    tags = subparsers.add_parser(
        "tags",
        description=HEADER + "\n" + " radtags tags: call tags from sorted reads",
        help="Call tags from one or more sorted reads files (one per sample).",
        epilog=TAGS_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    tags.add_argument(
        "-d", metavar="data", type=Path, required=True, nargs="+",
        help="One or more paths to select sorted reads files using regex (e.g., './sorted/*.reads')",
    )
    tags.add_argument(
        "-j", metavar="json", type=Path,
        help="Path to a saved tags_params.json to load params from. CLI args override it.",
    )
    tags.add_argument(
        "--force", "-f", action="store_true",
        help="Force overwrite of existing tags files in outpath.",
    )
    tags.add_argument(
        "--logger", type=str, nargs="*", default=("INFO", None),
        help=(
            "Logging info entered as one value for LOGLEVEL, or two values "
            "for LOGLEVEL LOGFILE; e.g., 'DEBUG' or 'DEBUG radtags.txt.'")
    )
    params = tags.add_argument_group("params", "args to set parameters")
    params.add_argument(
        "-o", dest="outpath", metavar="outpath", type=Path,
        help="Directory to write tags files and stats. Default=./tags",
    )
    params.add_argument(
        "-r", "--cluster_distance", dest="cluster_distance", type=int,
        help="Max quality-weighted distance of a unique to its cluster. Default=5.",
    )
    params.add_argument(
        "-q", "--quality_threshold", dest="quality_threshold", type=int,
        help="Min consensus quality at which two bases confidently differ. Default=20.",
    )
    params.add_argument(
        "-t", "--read_threshold", dest="read_threshold", type=int,
        help="Min number of reads supporting a tag. Default=2.",
    )
    params.add_argument(
        "-c", "--cores", dest="cores", type=int,
        help="Number of samples to process in parallel. Default=4.",
    )


def setup_parsers() -> argparse.ArgumentParser:
    """Setup and return an ArgumentParser w/ subcommands."""
    parser = argparse.ArgumentParser(
        prog="radtags",
        description=HEADER + "\n" + DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--version", action='version', version=f"radtags {VERSION}")
    subparsers = parser.add_subparsers(help="sub-commands", dest="subcommand")

    # add subcommands
    setup_fastq_subparser(subparsers)
    setup_sort_subparser(subparsers)
    setup_tags_subparser(subparsers)
    return parser


def get_params(args: argparse.Namespace) -> radtags.Params:
    """Return Params from an optional JSON file updated by CLI args."""
    params = radtags.Params.load_json(args.j) if args.j else radtags.Params()
    for key in radtags.Params.model_fields:
        val = getattr(args, key, None)
        if val is not None:
            setattr(params, key, val)
    return params


def main(argv=None) -> int:
    """Parse user CLI args and perform actions."""
    parser = setup_parsers()
    args = parser.parse_args(argv)

    # set logging ---------------------------------------------------
    if hasattr(args, "logger") and args.logger:
        if len(args.logger) > 1:
            radtags.set_log_level(args.logger[0], args.logger[1])
        else:
            radtags.set_log_level(args.logger[0])

    # fastq to reads job --------------------------------------------
    if args.subcommand == "fastq":
        from radtags.reads.fastq import write_reads_file, SANGER_RANGE, ILLUMINA_RANGE
        from radtags.reads.sort import sort_reads_file
        qual_range = args.qual_range
        if not qual_range:
            qual_range = ILLUMINA_RANGE if args.illumina else SANGER_RANGE
        write_reads_file(
            args.fastq1,
            args.fastq2,
            args.outfile,
            qual_low_char=qual_range[0],
            qual_high_char=qual_range[1],
            illumina=args.illumina,
        )
        if args.sort:
            sort_reads_file(args.outfile)
        return 0

    # sort job ------------------------------------------------------
    if args.subcommand == "sort":
        from radtags.reads.sort import sort_reads_file
        for path in args.reads:
            sort_reads_file(path, sort_start=args.sort_start)
        return 0

    # tags job ------------------------------------------------------
    if args.subcommand == "tags":
        try:
            params = get_params(args)
            tool = radtags.BuildTags(reads_paths=args.d, params=params, force=args.force)
        except (ValidationError, radtags.RadTagsError) as inst:
            logger.error(str(inst))
            return 1
        tool.run()
        return 1 if tool.failed else 0

    parser.print_help()
    return 0


def cli():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
