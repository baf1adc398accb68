"""population_pipeline package.

Contains modules for fetching DataUSA population records, cleaning and
validating them, caching them in MongoDB, and aggregating them into the
nested entity/year tree consumed by the visualization layer.

Architecture:
- Raw → Clean layers, with the Clean layer cached in MongoDB
- Dask is used for partition-wise cleaning
- Pydantic models validate the Clean layer
- Aggregations are pure functions over flat records
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
