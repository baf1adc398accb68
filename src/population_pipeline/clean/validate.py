"""Validation utilities for the Clean layer.

This module validates partition data against the Pydantic `PopulationDoc`
model and collapses duplicate `(entity_id, year)` rows before loading.
"""
from __future__ import annotations

import logging
import math
from typing import Any
from typing import cast, Any as TypingAny

import pandas as pd
from dask import delayed, compute  # type: ignore[attr-defined]
from pydantic import ValidationError

from population_pipeline.models import PopulationDoc

log = logging.getLogger(__name__)


def _none_if_nan(value: Any) -> Any:
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def validate_partition(pdf: pd.DataFrame) -> tuple[list[PopulationDoc], int]:
    """Validate a pandas partition of records using Pydantic.

    Args:
        pdf: Pandas DataFrame for the partition.

    Returns:
        A tuple of (list_of_validated_docs, bad_count).
    """
    good: list[PopulationDoc] = []
    bad = 0

    for rec in pdf.to_dict(orient="records"):
        rec = {k: _none_if_nan(v) for k, v in rec.items()}
        try:
            good.append(PopulationDoc.model_validate(rec))
        except ValidationError as e:
            log.debug("Rejected row %s: %s", rec, e)
            bad += 1

    return good, bad


def dedupe_docs(docs: list[PopulationDoc]) -> list[PopulationDoc]:
    """Keep one document per `(entity_id, year)`; later rows win."""
    by_key: dict[tuple[str, int], PopulationDoc] = {}
    for d in docs:
        by_key[(d.entity_id, d.year)] = d
    dropped = len(docs) - len(by_key)
    if dropped:
        log.warning("Dropped %d duplicate (entity_id, year) rows", dropped)
    return list(by_key.values())


def validate_ddf(ddf: Any) -> tuple[list[PopulationDoc], int]:
    """Validate every partition of a cleaned Dask DataFrame.

    Uses `to_delayed()` so each pandas partition is validated as a task.

    Returns:
        A tuple of (deduplicated_valid_docs, bad_count).
    """
    delayed_parts = ddf.to_delayed()
    tasks = [delayed(validate_partition)(part) for part in delayed_parts]

    # `compute` is untyped in our environment; cast to Any before calling
    results = cast(TypingAny, compute)(*tasks)

    good: list[PopulationDoc] = []
    bad_total = 0
    for docs, bad in results:
        good.extend(docs)
        bad_total += bad

    good = dedupe_docs(good)
    log.info("Validation complete: good=%d bad=%d", len(good), bad_total)
    return good, bad_total
