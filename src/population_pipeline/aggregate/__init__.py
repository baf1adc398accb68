"""Aggregation helpers.

This package turns flat Clean-layer records into the outputs consumed by the
visualization layer: the nested entity/year tree, whole-dataset summary
statistics, and per-entity yearly growth tables.
"""

from population_pipeline.aggregate.nodes import EntityNode, RootNode, YearNode
from population_pipeline.aggregate.summary import dataset_overview, summary_statistics
from population_pipeline.aggregate.tree import build_tree

__all__ = [
    "EntityNode",
    "RootNode",
    "YearNode",
    "build_tree",
    "dataset_overview",
    "summary_statistics",
]
