"""Read/write access to the cached `population_data` collection.

Documents are Clean-layer `PopulationDoc` dumps keyed by `(entity_id, year)`.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from population_pipeline.db import bulk_upsert
from population_pipeline.models import Pagination, PopulationDoc, Record

log = logging.getLogger(__name__)

COLLECTION = "population_data"
KEY_FIELDS = ("entity_id", "year")
SORTABLE_FIELDS = {"year", "metric", "entity_name", "entity_id", "fetched_at"}
MAX_PAGE_SIZE = 100

_PROJECTION = {"_id": False}


def ensure_indexes(collection: Collection[dict[str, Any]]) -> None:
    """Create the unique `(entity_id, year)` index and the sort indexes."""
    collection.create_index([("entity_id", ASCENDING), ("year", ASCENDING)], unique=True)
    collection.create_index([("year", DESCENDING)])
    collection.create_index([("metric", DESCENDING)])
    collection.create_index([("entity_name", ASCENDING)])


def upsert_docs(collection: Collection[dict[str, Any]], docs: Iterable[PopulationDoc]) -> int:
    """Upsert validated documents; returns the number written."""
    payload = [d.model_dump(mode="python") for d in docs]
    log.info("Upserting %d records into %s", len(payload), collection.name)
    written = bulk_upsert(collection, payload, KEY_FIELDS)
    log.info("Upsert complete for %s: %d rows", collection.name, written)
    return written


def _to_record(doc: dict[str, Any]) -> Record:
    return Record(
        entity_id=str(doc["entity_id"]),
        entity_name=str(doc["entity_name"]),
        year=int(doc["year"]),
        metric=doc["metric"],
    )


def load_records(
    collection: Collection[dict[str, Any]],
    start_year: int | None = None,
    end_year: int | None = None,
) -> list[Record]:
    """Return cached records newest year first, optionally within a year range.

    Args:
        collection: The `population_data` collection.
        start_year: Inclusive lower bound, or ``None``.
        end_year: Inclusive upper bound, or ``None``.
    """
    query: dict[str, Any] = {}
    bounds: dict[str, int] = {}
    if start_year is not None:
        bounds["$gte"] = start_year
    if end_year is not None:
        bounds["$lte"] = end_year
    if bounds:
        query["year"] = bounds

    # entity_id breaks ties so entity order in the tree is stable across reads
    cursor = collection.find(query, _PROJECTION).sort([("year", DESCENDING), ("entity_id", ASCENDING)])
    return [_to_record(doc) for doc in cursor]


def find_page(
    collection: Collection[dict[str, Any]],
    page: int = 1,
    limit: int = 10,
    sort_by: str = "year",
    order: str = "desc",
) -> tuple[list[dict[str, Any]], Pagination]:
    """Return one page of cached documents and its pagination metadata.

    Raises:
        ValueError: on a page below 1, a limit outside 1..100, an unknown
            sort field, or an order other than ``asc``/``desc``.
    """
    if page < 1:
        raise ValueError("page must be a positive integer")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    if sort_by not in SORTABLE_FIELDS:
        raise ValueError(f"sort_by must be one of {sorted(SORTABLE_FIELDS)}")
    if order not in ("asc", "desc"):
        raise ValueError('order must be either "asc" or "desc"')

    direction = ASCENDING if order == "asc" else DESCENDING
    skip = (page - 1) * limit

    docs = list(
        collection.find({}, _PROJECTION).sort(sort_by, direction).skip(skip).limit(limit)
    )
    total = collection.count_documents({})

    return docs, Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_records=total,
        records_per_page=limit,
    )
