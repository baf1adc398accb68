from __future__ import annotations

import pytest

from population_pipeline.models import Record


@pytest.fixture
def scenario_records() -> list[Record]:
    """Two entities; e1 has two years, e2 has one."""
    return [
        Record("e1", "A", 2020, 100),
        Record("e1", "A", 2021, 110),
        Record("e2", "B", 2021, 50),
    ]


@pytest.fixture
def datausa_payload() -> dict:
    return {
        "annotations": {"source_name": "Census Bureau", "dataset_name": "ACS 5-year Estimate"},
        "page": {"limit": 0, "offset": 0, "total": 3},
        "columns": ["Nation ID", "Nation", "Year", "Total Population"],
        "data": [
            {"Nation ID": "01000US", "Nation": "United States", "Year": 2021, "Total Population": 329725481},
            {"Nation ID": "01000US", "Nation": "United States", "Year": 2022, "Total Population": 331097593},
            {"Nation ID": "", "Nation": "Nowhere", "Year": 2022, "Total Population": 1},
        ],
    }
