#!/usr/bin/env python

"""Per-sample tag clustering of sorted reads.

Substeps:
1. Reads with identical sequences are merged into Uniques.
2. Uniques are grouped into Clusters by quality-weighted distance.
3. Alleles are called from each Cluster and written as Tags.

"""
