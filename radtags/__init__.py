#!/usr/bin/env python

"""API level access to radtags tag clustering.

Examples
--------
>>> import radtags
>>> params = radtags.Params(cluster_distance=5, outpath="/tmp/tags")
>>> tool = radtags.BuildTags(reads_paths="./sorted/*.reads", params=params)
>>> results = tool.run()
"""

# bring nested functions to top for API access
from radtags.core.logger_setup import set_log_level
from radtags.core.exceptions import RadTagsError
from radtags.schema import Params, TagStats, SampleResult
from radtags.tags.tags import BuildTags, tag_sample

__version__ = "1.2.1"
__author__ = "radtags developers"

# configure the logger
set_log_level("INFO")
