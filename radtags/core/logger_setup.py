#!/usr/bin/env python

"""Logger for radtags to STDERR and optionally to a LOGFILE.

logging to STDERR
-----------------
DEBUG: per-sample progress, used by developers to examine details.
INFO: summaries reported to users. (DEFAULT)
WARNING: rejected or skipped data that users should know about.
ERROR: failed samples, printed along with the error message.

logging to LOGFILE
------------------
Same levels as above, without color, rotated at 50 MB.

Examples
--------
>>> import radtags
>>> radtags.set_log_level("DEBUG")
>>> radtags.set_log_level("DEBUG", log_file="/tmp/radtags-log.txt")
"""

from typing import Optional
import sys
from pathlib import Path
from loguru import logger

LOGGERS = [0]


def formatter(record):
    """Custom formatter with time, level, source file and sample.

    Records logged from a sample worker carry the sample name bound
    as `extra["sample"]`, so that messages from samples running in
    parallel can be told apart. Other records leave the column blank.
    """
    end = record["extra"].get("end", "\n")
    sample = "<cyan>{extra[sample]:<12}</cyan>" if "sample" in record["extra"] else " " * 12
    fmessage = (
        "{time:hh:mm:ss} | "
        "<level>{level:<8}</level> <white>|</white> "
        "<magenta>{file:<12}</magenta> <white>|</white> "
        f"{sample} <white>|</white> "
        "{message}"
    ) + end
    return fmessage


def sample_logger(name: str):
    """Return the radtags logger bound to a sample name."""
    return logger.bind(name="radtags", sample=name)


def color_support() -> bool:
    """Check for color support in stderr as a terminal/tty."""
    return sys.stderr.isatty()


def _is_radtags(record) -> bool:
    return record["extra"].get("name") == "radtags"


def set_log_level(log_level: str = "DEBUG", log_file: Optional[Path] = None):
    """Replace the radtags sink with one to stderr or to a log file.

    Only records bound with name="radtags" are emitted, so any module
    logging for radtags puts `logger = logger.bind(name="radtags")` at
    its top, and sample workers use `sample_logger(name)`. Records are
    enqueued so that worker processes write through the parent's sink.
    """
    # the first call also removes the loguru default sink (0).
    for idx in LOGGERS:
        try:
            logger.remove(idx)
        except ValueError:
            pass
    LOGGERS.clear()

    kwargs = dict(level=log_level, format=formatter, filter=_is_radtags, enqueue=True)
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        idx = logger.add(sink=log_file, colorize=False, rotation="50 MB", **kwargs)
    else:
        idx = logger.add(sink=sys.stderr, colorize=color_support(), **kwargs)
    LOGGERS.append(idx)
    logger.bind(name="radtags").debug(f"radtags logging enabled: {log_level}")
