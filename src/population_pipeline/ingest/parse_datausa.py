"""Parsing helpers for DataUSA `jsonrecords` payloads.

`parse_payload_to_pandas` converts the payload into a pandas DataFrame with
the Raw column layout; `parse_payload_to_ddf` wraps it in a Dask DataFrame for
the Clean layer.
"""

from __future__ import annotations

from typing import Any, cast
import logging
import re
from datetime import datetime, timezone

import pandas as pd
import dask.dataframe as dd

from population_pipeline.models import DEFAULT_SOURCE

log = logging.getLogger(__name__)

ID_FIELD = "Nation ID"
NAME_FIELD = "Nation"
YEAR_FIELD = "Year"
METRIC_FIELD = "Total Population"

RAW_COLUMNS = [
    "entity_id",
    "entity_name",
    "year",
    "metric",
    "slug",
    "source",
    "fetched_at",
]

_WS_RE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Lower-case a name and replace whitespace runs with ``-``."""
    return _WS_RE.sub("-", name.strip().lower())


def parse_payload_to_pandas(payload: dict[str, Any]) -> pd.DataFrame:
    """Parse a DataUSA payload into a pandas DataFrame of raw rows.

    Rows without a nation id or nation name are dropped. Year and population
    values are passed through untouched; typing happens in the Clean layer.

    Args:
        payload: Decoded JSON with a ``data`` list of row objects.

    Returns:
        pandas.DataFrame with columns: `entity_id`, `entity_name`, `year`,
        `metric`, `slug`, `source`, `fetched_at`.

    Raises:
        ValueError: if the payload has no ``data`` list.
    """
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        raise ValueError("Invalid response from DataUSA API: missing 'data' list")

    fetched_at = datetime.now(timezone.utc).isoformat()
    rows: list[dict[str, object]] = []
    skipped = 0

    for item in data:
        if not isinstance(item, dict):
            skipped += 1
            continue
        entity_id = item.get(ID_FIELD)
        name = item.get(NAME_FIELD)
        if not entity_id or not name:
            skipped += 1
            continue
        name = str(name)
        rows.append(
            {
                "entity_id": str(entity_id),
                "entity_name": name,
                "year": item.get(YEAR_FIELD),
                "metric": item.get(METRIC_FIELD),
                "slug": slugify(name),
                "source": DEFAULT_SOURCE,
                "fetched_at": fetched_at,
            }
        )

    if skipped:
        log.warning("Dropped %d malformed rows or rows without %s/%s", skipped, ID_FIELD, NAME_FIELD)

    return pd.DataFrame(rows, columns=RAW_COLUMNS)


def parse_payload_to_ddf(payload: dict[str, Any], rows_per_partition: int = 50_000) -> Any:
    """Parse a payload into a Dask DataFrame.

    Args:
        payload: Decoded DataUSA JSON.
        rows_per_partition: Target partition size.

    Returns:
        Dask DataFrame with the Raw column layout.
    """
    pdf = parse_payload_to_pandas(payload)
    dd_mod = cast(Any, dd)
    return dd_mod.from_pandas(pdf, npartitions=max(1, len(pdf) // rows_per_partition))
