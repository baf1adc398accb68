"""Hierarchical aggregation of flat records into the entity/year tree.

Expectations:
- Input: an iterable of objects exposing `entity_id`, `entity_name`, `year`
  and `metric` (see `population_pipeline.models.Record`). Order does not
  matter except that the first occurrence of each entity fixes its position
  among the root's children.
- Output: a `RootNode` whose entity children hold year children sorted newest
  first, each carrying growth against the prior chronological year.

`aggregate_value` is the arithmetic mean of an entity's metrics across
whichever years are present, rounded half-up to an integer. Entities with
different year coverage are therefore not directly comparable by it.
"""

from __future__ import annotations

import logging
import math
import numbers
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol, Sequence

from population_pipeline.aggregate.nodes import DEFAULT_ROOT_NAME, EntityNode, RootNode, YearNode
from population_pipeline.errors import DataQualityError

log = logging.getLogger(__name__)


class RecordLike(Protocol):
    entity_id: str
    entity_name: str
    year: int
    metric: float


def _check_metric(rec: RecordLike) -> None:
    metric = rec.metric
    if isinstance(metric, bool) or not isinstance(metric, numbers.Real):
        raise DataQualityError(rec.entity_id, rec.year, f"metric is not a number: {metric!r}")
    if not math.isfinite(metric):
        raise DataQualityError(rec.entity_id, rec.year, f"metric is not finite: {metric!r}")
    if metric < 0:
        raise DataQualityError(rec.entity_id, rec.year, f"metric is negative: {metric!r}")


def round_half_up(value: float) -> int:
    """Round a non-negative value to the nearest integer, halves going up."""
    return int(Decimal(float(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def growth_rate(current: float, previous: float) -> float | None:
    """Percent change from `previous` to `current`; ``None`` when `previous` is 0."""
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def _group_by_entity(records: Iterable[RecordLike]) -> list[list[RecordLike]]:
    """Partition records by entity, preserving first-occurrence order."""
    index: dict[str, int] = {}
    groups: list[list[RecordLike]] = []
    seen: set[tuple[str, int]] = set()

    for rec in records:
        _check_metric(rec)
        key = (rec.entity_id, rec.year)
        if key in seen:
            raise DataQualityError(rec.entity_id, rec.year, "duplicate (entity_id, year)")
        seen.add(key)

        pos = index.get(rec.entity_id)
        if pos is None:
            index[rec.entity_id] = len(groups)
            groups.append([rec])
            continue

        first = groups[pos][0]
        if rec.entity_name != first.entity_name:
            log.warning(
                "Entity %s has conflicting names %r and %r; keeping %r",
                rec.entity_id,
                first.entity_name,
                rec.entity_name,
                first.entity_name,
            )
        groups[pos].append(rec)

    return groups


def _build_entity(group: Sequence[RecordLike]) -> EntityNode:
    first = group[0]
    ordered = sorted(group, key=lambda r: r.year, reverse=True)

    children: list[YearNode] = []
    for i, rec in enumerate(ordered):
        prev = ordered[i + 1] if i + 1 < len(ordered) else None
        growth = growth_rate(rec.metric, prev.metric) if prev is not None else None
        children.append(
            YearNode(
                id=f"{rec.entity_id}-{rec.year}",
                name=str(rec.year),
                year=rec.year,
                value=rec.metric,
                growth=growth,
            )
        )

    mean = sum(r.metric for r in group) / len(group)
    return EntityNode(
        id=first.entity_id,
        name=first.entity_name,
        aggregate_value=round_half_up(mean),
        children=tuple(children),
    )


def build_tree(records: Iterable[RecordLike], root_name: str = DEFAULT_ROOT_NAME) -> RootNode:
    """Build the nested entity/year tree from flat records.

    Args:
        records: Flat records in any order.
        root_name: Display name of the root node.

    Returns:
        A `RootNode`; empty input yields a root with no children.

    Raises:
        DataQualityError: on a negative, non-finite or non-numeric metric, or
            a duplicate `(entity_id, year)` pair.
    """
    groups = _group_by_entity(records)
    entities = tuple(_build_entity(g) for g in groups)
    log.debug("Built tree with %d entities", len(entities))
    return RootNode(name=root_name, children=entities)
