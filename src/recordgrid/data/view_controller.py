"""Virtualization controller for the grid.

Exposes the filtered/sorted view as a random-access sequence and hands the
rendering surface only the rows it asks for. The view is a list of record
references shared with the store, never copies.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..models.record import cell_text, format_column_header

if TYPE_CHECKING:
    from ..models.record import CellValue, Record


class ViewController(Sequence):
    """Current view of the session: ordered records and displayed columns.

    Row indexes are positions in the current view. Any set_view() call
    replaces the row count and drops the row-index cache before the next cell
    is served, so a stale index never reads the wrong record.
    """

    def __init__(self, columns: list[str] | None = None):
        self._rows: list[Record] = []
        self._columns: list[str] = list(columns or [])
        self._row_index_cache: dict[int, int] | None = None
        self._initial_sizing_done = False

    # --- Sequence protocol ---

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, index):
        return self._rows[index]

    # --- View updates ---

    def set_view(self, rows: list[Record], columns: list[str] | None = None) -> None:
        """Replace the current view.

        Args:
            rows: Filtered and sorted record references
            columns: Displayed columns in order (None keeps the current ones)
        """
        self._rows = rows
        if columns is not None:
            self._columns = list(columns)
        self._row_index_cache = None

    def consume_initial_sizing(self) -> bool:
        """Return True the first time only; columns are auto-sized once per session."""
        if self._initial_sizing_done:
            return False
        self._initial_sizing_done = True
        return True

    # --- Rows ---

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> list[Record]:
        return self._rows

    def record_at(self, row: int) -> Record | None:
        """Get the record at a view row, or None if out of range."""
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    def row_index_of(self, record: Record) -> int | None:
        """Find the view row that shows a record (by reference)."""
        if self._row_index_cache is None:
            self._row_index_cache = {id(r): i for i, r in enumerate(self._rows)}
        return self._row_index_cache.get(id(record))

    # --- Columns ---

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def headers(self) -> list[str]:
        return [format_column_header(column) for column in self._columns]

    def column_at(self, col: int) -> str | None:
        if 0 <= col < len(self._columns):
            return self._columns[col]
        return None

    def column_index(self, column: str) -> int | None:
        try:
            return self._columns.index(column)
        except ValueError:
            return None

    # --- Cells ---

    def cell_value(self, row: int, col: int) -> CellValue:
        """Get a raw cell value; None for out-of-range cells or missing keys."""
        record = self.record_at(row)
        column = self.column_at(col)
        if record is None or column is None:
            return None
        return record.get(column)

    def cell_display(self, row: int, col: int) -> str:
        return cell_text(self.cell_value(row, col))

    def get_rows(self, start: int, stop: int) -> list[list[str]]:
        """Get display strings for the rows in [start, stop).

        Only the requested window is built; indexes are clamped to the view.
        """
        start = max(0, start)
        stop = min(stop, len(self._rows))
        columns = self._columns
        return [
            [cell_text(record.get(column)) for column in columns]
            for record in self._rows[start:stop]
        ]
