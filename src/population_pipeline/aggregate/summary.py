"""Whole-dataset statistics over flat records."""

from __future__ import annotations

from typing import Iterable

from population_pipeline.aggregate.tree import RecordLike
from population_pipeline.models import DatasetOverview, SummaryStatistics


def summary_statistics(records: Iterable[RecordLike]) -> SummaryStatistics:
    """Compute count, metric min/max/mean and year bounds in one pass.

    Empty input yields every field as zero rather than raising, which is the
    "no data yet" state shown before the first fetch.
    """
    total = 0
    metric_sum = 0.0
    min_metric = max_metric = 0.0
    min_year = max_year = 0

    for rec in records:
        if total == 0:
            min_metric = max_metric = rec.metric
            min_year = max_year = rec.year
        else:
            min_metric = min(min_metric, rec.metric)
            max_metric = max(max_metric, rec.metric)
            min_year = min(min_year, rec.year)
            max_year = max(max_year, rec.year)
        metric_sum += rec.metric
        total += 1

    if total == 0:
        return SummaryStatistics()

    return SummaryStatistics(
        total_records=total,
        min_metric=min_metric,
        max_metric=max_metric,
        avg_metric=metric_sum / total,
        min_year=min_year,
        max_year=max_year,
    )


def dataset_overview(records: Iterable[RecordLike]) -> DatasetOverview:
    """Return distinct year/entity counts and the latest year's metric.

    `latest_metric` is taken from the first record seen for the latest year.
    """
    recs = list(records)
    if not recs:
        return DatasetOverview()

    years = {r.year for r in recs}
    latest_year = max(years)
    latest = next(r for r in recs if r.year == latest_year)

    return DatasetOverview(
        total_records=len(recs),
        unique_years=len(years),
        unique_entities=len({r.entity_id for r in recs}),
        latest_year=latest_year,
        latest_metric=latest.metric,
    )
