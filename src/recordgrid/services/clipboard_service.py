"""Clipboard paste into the grid in edit mode.

Clipboard text is tab-separated columns and newline-separated rows, the
format spreadsheets put on the clipboard.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..utils.debug_trace import get_logger

if TYPE_CHECKING:
    from ..data.edit_tracker import EditTracker

logger = get_logger(__name__)

LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


def parse_clipboard_text(text):
    """Parse clipboard text into rows of cell strings.

    Empty lines after the first row are dropped (spreadsheets add a
    trailing newline).

    Returns:
        List of rows, each a list of cell strings
    """
    if not text:
        return []

    rows = []
    for line in LINE_BREAK_PATTERN.split(text):
        if not line and rows:
            continue
        rows.append(line.split("\t"))
    return rows


def _first_editable_column(tracker: EditTracker, col: int) -> int:
    """Advance to the first editable column at or after col (column_count if none)."""
    view = tracker.view
    while col < view.column_count and not tracker.is_editable(view.column_at(col)):
        col += 1
    return col


def paste(tracker: EditTracker, text: str) -> tuple[int, int]:
    """Paste clipboard text at the current selection.

    A single clipboard cell pasted onto several selected cells is broadcast
    to each selected editable cell. Otherwise the block is laid out from the
    top-left selected cell (or the current cell), skipping non-editable
    columns and stopping at the last row and column.

    Returns:
        Tuple of (pasted_count, skipped_count)
    """
    if not tracker.is_edit_mode or tracker.current_cell is None:
        return 0, 0

    data = parse_clipboard_text(text)
    if not data:
        return 0, 0

    view = tracker.view
    selected = tracker.selected_cells
    pasted = 0
    skipped = 0

    if len(data) == 1 and len(data[0]) == 1 and len(selected) > 1:
        value = data[0][0]
        for row, col in selected:
            column = view.column_at(col)
            if column is None or not tracker.is_editable(column):
                skipped += 1
                continue
            if tracker.edit_cell(row, column, value):
                pasted += 1
            else:
                skipped += 1
    else:
        start_row, start_col = tracker.current_cell
        if len(selected) > 1:
            start_row = min(row for row, _ in selected)
            start_col = min(col for _, col in selected)

        start_col = _first_editable_column(tracker, start_col)
        if start_col >= view.column_count:
            logger.info("No editable column found at cursor position")
            return 0, 0

        for offset, clip_row in enumerate(data):
            target_row = start_row + offset
            if target_row >= view.row_count:
                break

            target_col = start_col
            for value in clip_row:
                target_col = _first_editable_column(tracker, target_col)
                if target_col >= view.column_count:
                    break
                if tracker.edit_cell(target_row, view.column_at(target_col), value):
                    pasted += 1
                else:
                    skipped += 1
                target_col += 1

    logger.info(
        f"Pasted {pasted} cell(s), skipped {skipped}; pending edits: {tracker.pending_count}"
    )
    return pasted, skipped
