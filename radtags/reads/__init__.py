#!/usr/bin/env python

"""Prepare sorted reads files from fastq data.

API
---
>>> from radtags.reads.fastq import write_reads_file
>>> from radtags.reads.sort import sort_reads_file
>>> write_reads_file("1A_0_R1.fastq.gz", "1A_0_R2.fastq.gz", "1A_0.reads")
>>> sort_reads_file("1A_0.reads")

CLI
---
$ radtags fastq -1 1A_0_R1.fastq.gz -2 1A_0_R2.fastq.gz -o 1A_0.reads --sort
"""
