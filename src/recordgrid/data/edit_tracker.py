"""Edit tracker: edit-mode state machine, cell selection and pending edits.

Pending edits are keyed by (stable identity, column name), never by row
index. Filtering or sorting may reorder rows between two keystrokes; the
identity key keeps every edit attached to the record it was made on.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..models.record import cell_text, is_column_editable
from ..services.transform_service import transform_value
from ..utils.debug_trace import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ..models.record import CellValue, IdentityTable, Record
    from ..services.transform_service import TransformSpec
    from .view_controller import ViewController

logger = get_logger(__name__)

Cell = tuple[int, int]  # (view row, view column index)
EditKey = tuple[int, str]  # (identity, column name)

_MISSING = object()


class EditMode(Enum):
    NORMAL = "normal"  # row selection, read-only
    EDIT = "edit"  # cell selection, mutation allowed


@dataclass
class PendingEdit:
    """One uncommitted cell change."""

    identity: int
    column: str
    new_value: str
    record: Record

    @property
    def key(self) -> EditKey:
        return (self.identity, self.column)


class EditTracker:
    """Tracks edit mode, the cell selection and pending cell edits for a session.

    Cells are addressed by position in the current view; everything stored
    past an edit is addressed by identity.
    """

    def __init__(
        self,
        view: ViewController,
        identities: IdentityTable,
        is_editable: Callable[[str], bool] | None = None,
    ):
        self._view = view
        self._identities = identities
        self._is_editable = is_editable or is_column_editable

        self.mode = EditMode.NORMAL
        self._pending: dict[EditKey, PendingEdit] = {}
        self._originals: dict[EditKey, CellValue] = {}
        self._touched: dict[int, Record] = {}

        self._selected: list[Cell] = []
        self.current_cell: Cell | None = None
        self.anchor: Cell | None = None

    @property
    def view(self) -> ViewController:
        return self._view

    # --- Mode ---

    @property
    def is_edit_mode(self) -> bool:
        return self.mode is EditMode.EDIT

    def toggle_edit_mode(self) -> EditMode:
        """Switch between normal and edit mode.

        Either transition resets the cell selection and anchor. Entering edit
        mode keeps the current cell as anchor if its column is editable.
        """
        self._selected = []
        self.anchor = None

        if self.is_edit_mode:
            self.mode = EditMode.NORMAL
        else:
            self.mode = EditMode.EDIT
            if self.current_cell is not None and self._cell_editable(self.current_cell):
                self.anchor = self.current_cell

        logger.debug(f"Edit mode: {self.mode.value}")
        return self.mode

    def is_editable(self, column: str) -> bool:
        return self._is_editable(column)

    # --- Pending edits ---

    @property
    def pending(self) -> list[PendingEdit]:
        """Pending edits in the order they were first made."""
        return list(self._pending.values())

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    @property
    def touched_records(self) -> list[Record]:
        """Records modified during this session, in first-touch order."""
        return list(self._touched.values())

    def original_value(self, record: Record, column: str) -> CellValue:
        """Value a cell had before its first pending edit (current value if unedited)."""
        identity = self._identities.peek(record)
        key = (identity, column)
        if identity is not None and key in self._originals:
            original = self._originals[key]
            return None if original is _MISSING else original
        return record.get(column)

    def edit_record(self, record: Record, column: str, value: str) -> bool:
        """Record a pending edit against a record and mutate it in place.

        Returns:
            True if the edit was recorded, False if rejected (not in edit
            mode, or the column isn't editable). Rejected edits never mutate.
        """
        if not self.is_edit_mode or not self._is_editable(column):
            return False

        identity = self._identities.identity_of(record)
        key = (identity, column)
        if key not in self._originals:
            self._originals[key] = record.get(column, _MISSING)

        self._pending[key] = PendingEdit(identity, column, value, record)
        record[column] = value
        self._touched.setdefault(identity, record)
        return True

    def edit_cell(self, row: int, column: str, value: str) -> bool:
        """Edit a cell addressed by current view row and column name."""
        record = self._view.record_at(row)
        if record is None:
            return False
        return self.edit_record(record, column, value)

    def clear_pending(self) -> None:
        """Forget pending edits, keeping the in-memory values and touched set."""
        self._pending.clear()
        self._originals.clear()

    def discard(self) -> int:
        """Restore original values of every pending edit and forget them.

        Returns:
            Number of edits discarded
        """
        count = len(self._pending)
        for (identity, column), original in self._originals.items():
            record = self._identities.record_for(identity)
            if record is None:
                continue
            if original is _MISSING:
                record.pop(column, None)
            else:
                record[column] = original
        self._pending.clear()
        self._originals.clear()
        self._touched.clear()
        return count

    # --- Selection ---

    @property
    def selected_cells(self) -> list[Cell]:
        return list(self._selected)

    def reset_selection(self) -> None:
        """Drop the cell selection (row positions are stale after a view change)."""
        self._selected = []
        self.current_cell = None
        self.anchor = None

    def _in_range(self, cell: Cell) -> bool:
        row, col = cell
        return 0 <= row < self._view.row_count and 0 <= col < self._view.column_count

    def _cell_editable(self, cell: Cell) -> bool:
        column = self._view.column_at(cell[1])
        return column is not None and self._is_editable(column)

    def _editable_columns(self) -> list[int]:
        return [
            col
            for col in range(self._view.column_count)
            if self._is_editable(self._view.column_at(col))
        ]

    def select_cells(self, cells: Iterable[Cell]) -> list[Cell]:
        """Replace the selection with the given in-range cells.

        Outside edit mode any in-range cell is kept; in edit mode only cells
        in editable columns are.
        """
        selected = []
        seen = set()
        for cell in cells:
            cell = (int(cell[0]), int(cell[1]))
            if cell in seen or not self._in_range(cell):
                continue
            if self.is_edit_mode and not self._cell_editable(cell):
                continue
            seen.add(cell)
            selected.append(cell)

        self._selected = selected
        if selected:
            if self.current_cell not in seen:
                self.current_cell = selected[0]
            if self.anchor is None:
                self.anchor = self.current_cell
        return self.selected_cells

    def set_current_cell(self, row: int, col: int) -> None:
        """Move the cursor to a cell, selecting only it and anchoring there."""
        cell = (row, col)
        if not self._in_range(cell):
            return
        self.current_cell = cell
        self.anchor = cell
        self._selected = [cell]

    def _next_editable_column(self, col: int, direction: int) -> int:
        """Next editable column in a direction, or col itself if there is none."""
        if direction == 0:
            return col
        step = 1 if direction > 0 else -1
        candidate = col + step
        while 0 <= candidate < self._view.column_count:
            if self._is_editable(self._view.column_at(candidate)):
                return candidate
            candidate += step
        return col

    def _step(self, d_row: int, d_col: int) -> Cell | None:
        if self.current_cell is None:
            return None
        row, col = self.current_cell
        new_row = min(max(0, row + d_row), self._view.row_count - 1)
        new_col = self._next_editable_column(col, d_col)
        if (new_row, new_col) == (row, col) or new_row < 0:
            return None
        return (new_row, new_col)

    def move_current_cell(self, d_row: int, d_col: int) -> bool:
        """Arrow-key move; horizontal moves skip non-editable columns."""
        target = self._step(d_row, d_col)
        if target is None:
            return False
        self.set_current_cell(*target)
        return True

    def extend_selection(self, d_row: int, d_col: int) -> bool:
        """Shift+arrow: move the cursor and select the rectangle from the fixed anchor."""
        target = self._step(d_row, d_col)
        if target is None:
            return False

        if self.anchor is None:
            self.anchor = self.current_cell
        self.current_cell = target

        anchor_row, anchor_col = self.anchor
        rows = range(min(anchor_row, target[0]), max(anchor_row, target[0]) + 1)
        cols = range(min(anchor_col, target[1]), max(anchor_col, target[1]) + 1)
        self._selected = [
            (row, col)
            for row in rows
            for col in cols
            if self._in_range((row, col)) and self._cell_editable((row, col))
        ]
        return True

    def add_to_selection(self, d_row: int, d_col: int) -> bool:
        """Ctrl+arrow: add the next cell to the selection and re-anchor on it."""
        target = self._step(d_row, d_col)
        if target is None:
            return False
        if target not in self._selected:
            self._selected.append(target)
        self.current_cell = target
        self.anchor = target
        return True

    def select_rows_of_selection(self) -> list[Cell]:
        """Select every editable cell in the rows touched by the selection."""
        if not self._selected:
            return []
        rows = sorted({row for row, _ in self._selected})
        editable = self._editable_columns()
        self._selected = [(row, col) for row in rows for col in editable]
        return self.selected_cells

    def select_columns_of_selection(self) -> list[Cell]:
        """Select every row of the editable columns touched by the selection."""
        if not self._selected:
            return []
        cols = sorted({col for _, col in self._selected if self._cell_editable((0, col))})
        if not cols:
            return self.selected_cells
        self._selected = [(row, col) for row in range(self._view.row_count) for col in cols]
        return self.selected_cells

    def selected_editable_cells(self) -> list[Cell]:
        return [cell for cell in self._selected if self._cell_editable(cell)]

    # --- Bulk edits ---

    def apply_value_to_selection(self, value: str) -> int:
        """Broadcast one value to every selected editable cell.

        Returns:
            Number of cells edited
        """
        count = 0
        for row, col in self.selected_editable_cells():
            if self.edit_cell(row, self._view.column_at(col), value):
                count += 1
        return count

    def apply_transform_to_selection(self, spec: TransformSpec) -> int:
        """Transform each selected editable cell individually.

        Cells whose value doesn't change are skipped.

        Returns:
            Number of cells edited
        """
        count = 0
        for row, col in self.selected_editable_cells():
            record = self._view.record_at(row)
            column = self._view.column_at(col)
            if record is None:
                continue
            original = cell_text(record.get(column))
            new_value = transform_value(original, spec, record)
            if new_value == original:
                continue
            if self.edit_record(record, column, new_value):
                logger.debug(f"Cell [{row}, {column}]: {original!r} -> {new_value!r}")
                count += 1
        return count
