"""Tree node types produced by `build_tree`.

The tree has three node variants: a single `RootNode`, one `EntityNode` per
entity, and one `YearNode` per record. `to_dict` renders the plain nested
form consumed by the tree view.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from population_pipeline.aggregate.formatting import format_in_millions

ROOT_ID = "root"
DEFAULT_ROOT_NAME = "Population Data"


@dataclass(frozen=True)
class YearNode:
    """Leaf node for one entity-year observation.

    Attributes:
        id: ``"<entity_id>-<year>"``.
        name: The year as a string.
        year: The year as an integer.
        value: The observed metric.
        growth: Percent change against the prior chronological year of the
            same entity, or ``None`` when there is no usable prior year.
    """
    id: str
    name: str
    year: int
    value: float
    growth: float | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": "year",
            "value": self.value,
            "formattedValue": format_in_millions(self.value),
        }
        if self.growth is not None:
            out["growth"] = self.growth
        return out


@dataclass(frozen=True)
class EntityNode:
    """Entity grouping node; children are ordered newest year first."""
    id: str
    name: str
    aggregate_value: int
    children: tuple[YearNode, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": "entity",
            "value": self.aggregate_value,
            "formattedValue": f"Avg: {format_in_millions(self.aggregate_value)}",
            "children": [c.to_dict() for c in self.children],
        }


@dataclass(frozen=True)
class RootNode:
    """The single root of the tree."""
    name: str = DEFAULT_ROOT_NAME
    children: tuple[EntityNode, ...] = ()
    id: str = ROOT_ID

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": "root",
            "children": [c.to_dict() for c in self.children],
        }


TreeNode = Union[RootNode, EntityNode, YearNode]
