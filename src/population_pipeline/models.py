"""Record types and Pydantic models used for Clean validation and outputs.

`Record` is the flat input of the aggregation layer. `PopulationDoc` is the
validated Clean-layer document stored in MongoDB, and the remaining models
describe small outputs consumed by the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SOURCE = "DataUSA API"


@dataclass(frozen=True)
class Record:
    """One flat input tuple combining an entity, a year, and a metric value.

    Attributes:
        entity_id: Grouping key (e.g. the DataUSA nation id).
        entity_name: Display name of the entity.
        year: Calendar year of the observation.
        metric: Observed value (population); expected to be non-negative.
    """
    entity_id: str
    entity_name: str
    year: int
    metric: float


class PopulationDoc(BaseModel):
    """Schema for a cleaned and validated population record.

    Attributes:
        entity_id: Nation identifier.
        entity_name: Nation name.
        year: Observation year (validated range).
        metric: Total population, finite and non-negative.
        slug: URL-friendly entity name.
        source: Upstream source label.
        fetched_at: Timestamp when the record was fetched.
    """
    model_config = ConfigDict(extra="forbid")
    entity_id: str = Field(..., min_length=1)
    entity_name: str = Field(..., min_length=1)
    year: int = Field(..., ge=1900, le=2100)
    metric: float = Field(..., ge=0, allow_inf_nan=False)
    slug: str = Field(..., min_length=1)
    source: str = DEFAULT_SOURCE
    fetched_at: datetime

    def to_record(self) -> Record:
        """Return the flat `Record` used by the aggregation layer."""
        return Record(
            entity_id=self.entity_id,
            entity_name=self.entity_name,
            year=self.year,
            metric=self.metric,
        )


class SummaryStatistics(BaseModel):
    """Whole-dataset statistics; all zero when there is no data yet."""
    model_config = ConfigDict(extra="forbid")
    total_records: int = Field(0, ge=0)
    min_metric: float = 0
    max_metric: float = 0
    avg_metric: float = 0
    min_year: int = 0
    max_year: int = 0


class DatasetOverview(BaseModel):
    """Counts shown above the tree: distinct years and entities, latest value."""
    model_config = ConfigDict(extra="forbid")
    total_records: int = Field(0, ge=0)
    unique_years: int = Field(0, ge=0)
    unique_entities: int = Field(0, ge=0)
    latest_year: int | None = None
    latest_metric: float = 0


class Pagination(BaseModel):
    """Pagination metadata for a listing page."""
    model_config = ConfigDict(extra="forbid")
    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_records: int = Field(..., ge=0)
    records_per_page: int = Field(..., ge=1)
