"""Sort service: natural ordering and multi-column sort criteria.

Natural ordering compares digit runs numerically and text runs
case-insensitively, so "Item 2" sorts before "Item 10".
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..models.constants import MAX_SORT_CRITERIA
from ..models.record import cell_text
from ..models.sort_criterion import SortCriterion, SortDirection
from ..utils.debug_trace import perf_timer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..models.record import CellValue, Record

_DIGIT_RUNS = re.compile(r"(\d+)")


def natural_key(value: CellValue) -> tuple:
    """Natural sort key for a cell value.

    re.split with a capturing group always alternates text, number, text, ...
    so keys compare text with text and numbers with numbers position by
    position.

    Examples:
        - "Item 10" -> ("item ", 10, "")
        - "a2b" -> ("a", 2, "b")
    """
    parts = _DIGIT_RUNS.split(cell_text(value))
    return tuple(int(part) if i % 2 else part.lower() for i, part in enumerate(parts))


class SortService:
    """Maintains the active sort criteria for one session.

    Criteria are kept most-recent first and capped at MAX_SORT_CRITERIA.
    """

    def __init__(self, max_criteria: int = MAX_SORT_CRITERIA):
        self._max_criteria = max_criteria
        self.criteria: list[SortCriterion] = []

    def find(self, column: str) -> SortCriterion | None:
        for criterion in self.criteria:
            if criterion.column == column:
                return criterion
        return None

    def click_header(self, column: str, shift: bool = False) -> None:
        """Update criteria for a header click.

        Without shift the column cycles ascending -> descending -> removed and
        moves to the front. With shift the column's criterion is removed.
        """
        existing = self.find(column)

        if shift:
            if existing is not None:
                self.criteria.remove(existing)
            return

        if existing is None:
            self.criteria.insert(0, SortCriterion(column, SortDirection.ASCENDING))
        else:
            self.criteria.remove(existing)
            if existing.direction is SortDirection.ASCENDING:
                existing.direction = SortDirection.DESCENDING
                self.criteria.insert(0, existing)

        del self.criteria[self._max_criteria :]

    def sort_records(self, records: Sequence[Record]) -> list[Record]:
        """Return records ordered by the active criteria.

        Applies stable sorts from the least significant criterion to the most
        significant, so ties fall through to the next criterion and finally
        to the incoming order.
        """
        result = list(records)
        if not self.criteria:
            return result

        with perf_timer("sort_records", row_count=len(result)):
            for criterion in reversed(self.criteria):
                column = criterion.column
                result.sort(
                    key=lambda record: natural_key(record.get(column)),
                    reverse=criterion.descending,
                )
        return result
