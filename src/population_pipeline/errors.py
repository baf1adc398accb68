"""Exceptions raised by the aggregation layer."""

from __future__ import annotations


class DataQualityError(ValueError):
    """A record failed validation during aggregation.

    Attributes:
        entity_id: Entity of the offending record.
        year: Year of the offending record.
    """

    def __init__(self, entity_id: str, year: int, reason: str) -> None:
        self.entity_id = entity_id
        self.year = year
        self.reason = reason
        super().__init__(f"({entity_id}, {year}): {reason}")
