"""Cleaning utilities for the pipeline.

Provides functions to normalize raw DataUSA rows, coerce numeric fields, and
validate partitions into Clean-layer documents.
"""
