from __future__ import annotations

import pytest

from population_pipeline.aggregate.summary import dataset_overview, summary_statistics
from population_pipeline.models import Record


def test_summary_statistics_empty_is_all_zero() -> None:
    assert summary_statistics([]).model_dump() == {
        "total_records": 0,
        "min_metric": 0,
        "max_metric": 0,
        "avg_metric": 0,
        "min_year": 0,
        "max_year": 0,
    }


def test_summary_statistics_scenario(scenario_records: list[Record]) -> None:
    s = summary_statistics(scenario_records)
    assert s.total_records == 3
    assert s.min_metric == 50
    assert s.max_metric == 110
    assert s.avg_metric == pytest.approx(260 / 3)
    assert (s.min_year, s.max_year) == (2020, 2021)


def test_summary_statistics_accepts_generator(scenario_records: list[Record]) -> None:
    s = summary_statistics(r for r in scenario_records)
    assert s.total_records == 3


def test_dataset_overview(scenario_records: list[Record]) -> None:
    o = dataset_overview(scenario_records)
    assert o.total_records == 3
    assert o.unique_years == 2
    assert o.unique_entities == 2
    assert o.latest_year == 2021
    assert o.latest_metric == 110


def test_dataset_overview_empty() -> None:
    o = dataset_overview([])
    assert o.latest_year is None
    assert o.unique_entities == 0
