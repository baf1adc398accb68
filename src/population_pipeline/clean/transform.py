"""Cleaning and normalization utilities.

This module contains transformations that are applied partition-wise using
Dask. The output is a Dask DataFrame whose schema is stable and suitable for
Pydantic validation in the Clean layer.
"""
from __future__ import annotations

import logging
from typing import Any

import pandas as pd

log = logging.getLogger(__name__)


def _clean_partition(pdf: pd.DataFrame) -> pd.DataFrame:
    """Partition-level cleaning function applied via map_partitions.

    Args:
        pdf: Pandas DataFrame for the partition.

    Returns:
        Cleaned Pandas DataFrame.
    """
    pdf = pdf.copy()

    # -----------------------------
    # Normalize identifiers and names
    # -----------------------------
    if "entity_id" in pdf.columns:
        pdf["entity_id"] = pdf["entity_id"].astype(str).str.strip()

    if "entity_name" in pdf.columns:
        pdf["entity_name"] = (
            pdf["entity_name"]
            .astype(str)
            .str.strip()
            .str.replace(r"\s+", " ", regex=True)
        )
        pdf["slug"] = pdf["entity_name"].str.lower().str.replace(" ", "-", regex=False)

    # -----------------------------
    # Numeric coercion; bad values become NaN and fail validation later
    # -----------------------------
    for col in ("year", "metric"):
        if col in pdf.columns:
            pdf[col] = pd.to_numeric(pdf[col], errors="coerce").astype("float64")

    return pdf


def clean_raw_ddf(ddf: Any) -> Any:
    """Clean raw DataUSA rows.

    Performs whitespace normalization of names, recomputes slugs from the
    normalized name, and coerces `year` and `metric` to numbers.

    Returns:
        Transformed Dask DataFrame with a stable schema for validation.
    """
    log.info("Starting clean_raw_ddf transformation")
    meta = _clean_partition(ddf._meta)
    return ddf.map_partitions(_clean_partition, meta=meta)
