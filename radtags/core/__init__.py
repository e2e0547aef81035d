#!/usr/bin/env python

from radtags.core.exceptions import RadTagsError, ReadFormatError, ReadLengthError
from radtags.core.logger_setup import set_log_level, sample_logger
