#!/usr/bin/env python

"""Pydantic schemas for params and per-sample results."""

from radtags.schema.params_schema import Params
from radtags.schema.sample_schema import TagStats, SampleResult
