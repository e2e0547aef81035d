#!/usr/bin/env python


class RadTagsError(Exception):
    """Raise a custom exception that will report with traceback.

    This is used to catch and report errors for a single sample. The
    worker pool records it against the failing sample and continues
    with the others.
    """
    def __init__(self, *args, **kwargs):
        Exception.__init__(self, *args, **kwargs)


class ReadFormatError(RadTagsError):
    """A line of the reads file cannot be parsed into a read."""


class ReadLengthError(RadTagsError):
    """The first read of a sample has an unusable length."""
