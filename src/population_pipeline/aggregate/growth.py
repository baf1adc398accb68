"""Per-entity yearly growth tables.

Tables here are small (one row per entity-year) and are built eagerly with
pandas, in contrast to the partitioned Clean layer.
"""
from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from population_pipeline.aggregate.tree import RecordLike

GROWTH_COLUMNS = ["entity_id", "entity_name", "year", "metric", "yoy_pct"]


def records_to_frame(records: Iterable[RecordLike]) -> pd.DataFrame:
    """Return a DataFrame with one row per record."""
    rows = [
        {
            "entity_id": r.entity_id,
            "entity_name": r.entity_name,
            "year": int(r.year),
            "metric": float(r.metric),
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=GROWTH_COLUMNS[:4])


def yearly_growth_frame(pdf: pd.DataFrame) -> pd.DataFrame:
    """Compute year-over-year percent change per entity.

    Args:
        pdf: DataFrame with `entity_id`, `entity_name`, `year`, `metric`.

    Returns:
        DataFrame with columns `entity_id`, `entity_name`, `year`, `metric`,
        `yoy_pct`, sorted by entity then ascending year. `yoy_pct` is NaN for
        an entity's first year and where the prior metric is zero.
    """
    if pdf.empty:
        return pd.DataFrame(columns=GROWTH_COLUMNS)

    out = pdf.sort_values(["entity_id", "year"], kind="mergesort").reset_index(drop=True)
    out["metric"] = out["metric"].astype(float)

    prev = out.groupby("entity_id", sort=False)["metric"].shift(1)
    prev = prev.replace(0.0, np.nan)
    out["yoy_pct"] = (out["metric"] - prev) / prev * 100.0

    return out[GROWTH_COLUMNS]


def yearly_growth_by_entity(records: Iterable[RecordLike]) -> list[dict[str, object]]:
    """Group yearly growth rows per entity for JSON output.

    Returns:
        ``[{"entity_id", "entity_name", "years": [{"year", "metric", "yoy_pct"}]}]``
        with `yoy_pct` as ``None`` where undefined.
    """
    table = yearly_growth_frame(records_to_frame(records))
    out: list[dict[str, object]] = []
    for entity_id, grp in table.groupby("entity_id", sort=False):
        years = [
            {
                "year": int(row.year),
                "metric": float(row.metric),
                "yoy_pct": None if pd.isna(row.yoy_pct) else float(row.yoy_pct),
            }
            for row in grp.itertuples(index=False)
        ]
        out.append(
            {
                "entity_id": entity_id,
                "entity_name": grp["entity_name"].iloc[0],
                "years": years,
            }
        )
    return out
