"""Sort criterion model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SortDirection(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


@dataclass
class SortCriterion:
    """One active sort key. Lists of criteria are kept most-recent first."""

    column: str
    direction: SortDirection = SortDirection.ASCENDING

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESCENDING

    def __repr__(self) -> str:
        return f"SortCriterion({self.column!r}, {self.direction.value})"
