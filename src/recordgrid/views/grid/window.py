"""Modal grid window: search box over a tksheet table.

tksheet draws only the cells inside the visible canvas area; the window feeds
it display strings from the session's ViewController and re-renders whenever
the session's view changes.

Each render hands tksheet the whole view through get_rows(0, row_count).
tksheet keeps its data as a plain list of rows and has no callback for
fetching rows on scroll, so the strings are built up front while drawing
stays limited to the visible cells. The cost is one cell_text() call per
cell of the filtered view on each view change. get_rows() takes a window so a
scroll-driven source can replace the full fetch without touching the view.
"""

from __future__ import annotations

import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from typing import TYPE_CHECKING

from tksheet import Sheet

from ...models.sort_criterion import SortDirection
from ...utils.debug_trace import get_logger
from .transform_dialog import TransformDialog

if TYPE_CHECKING:
    from ...data.session import GridSession

logger = get_logger(__name__)

SHIFT_MASK = 0x0001
CONTROL_MASK = 0x0004

SORT_MARKS = {SortDirection.ASCENDING: "▲", SortDirection.DESCENDING: "▼"}

ARROWS = {"Up": (-1, 0), "Down": (1, 0), "Left": (0, -1), "Right": (0, 1)}


class GridWindow(tk.Toplevel):
    """Window for one GridSession.

    Keys:
    - F2: toggle edit mode (edit mode with a selection: open the cell transform prompt)
    - Enter: commit edits / create from search / finish selection
    - Escape: leave edit mode, or cancel the session
    - Header click / Shift+click: advance / remove sort on that column
    - Arrows, Shift+arrows, Ctrl+arrows: move, extend, add (edit mode)
    - Shift+Space / Ctrl+Space: select rows / columns of the selection (edit mode)
    - Ctrl+V: paste (edit mode), Ctrl+E: export CSV, Delete: delete rows
    - Alt+D: focus search, Alt+S: toggle spanning all screens
    """

    # --- Rendering ---

    def _header_labels(self) -> list[str]:
        labels = []
        criteria = self.session.sort_service.criteria
        for column, header in zip(self.session.view.columns, self.session.view.headers):
            mark = ""
            for rank, criterion in enumerate(criteria, start=1):
                if criterion.column == column:
                    mark = f" {SORT_MARKS[criterion.direction]}"
                    if len(criteria) > 1:
                        mark += str(rank)
                    break
            labels.append(header + mark)
        return labels

    def _render(self) -> None:
        """Push the current view into the sheet."""
        view = self.session.view
        self._syncing = True
        try:
            columns_changed = view.columns != self._rendered_columns
            self._rendered_columns = view.columns
            self.sheet.set_sheet_data(
                view.get_rows(0, view.row_count),
                reset_col_positions=columns_changed,
                redraw=False,
            )
            self.sheet.headers(self._header_labels(), redraw=False)
            self._apply_edit_styling()

            if view.consume_initial_sizing() and (
                view.column_count < self.session.settings.auto_size_max_columns
            ):
                self.sheet.set_all_cell_sizes_to_text(redraw=False)

            for row in self.session.selected_rows:
                self.sheet.add_row_selection(row, redraw=False, run_binding_func=False)
            self.sheet.refresh()
        finally:
            self._syncing = False
        self._update_title()

    def _apply_edit_styling(self) -> None:
        """Color editable and read-only columns while in edit mode.

        Cells holding uncommitted edits are marked on top of the column colors.
        """
        self.sheet.dehighlight_all(redraw=False)
        if not self.session.tracker.is_edit_mode:
            return

        colors = self.session.settings.colors
        for col, column in enumerate(self.session.view.columns):
            if self.session.tracker.is_editable(column):
                self.sheet.highlight_cells(
                    column=col, canvas="header", bg=colors["editable_header_bg"], fg="black"
                )
            else:
                self.sheet.highlight_cells(
                    column=col,
                    canvas="header",
                    bg=colors["readonly_header_bg"],
                    fg=colors["readonly_header_fg"],
                )
                self.sheet.highlight_columns(
                    columns=[col],
                    bg=colors["readonly_cell_bg"],
                    fg=colors["readonly_cell_fg"],
                    highlight_header=False,
                    redraw=False,
                )
        for row, col in self.session.pending_cells():
            self.sheet.highlight_cells(
                row=row, column=col, bg=colors["pending_cell_bg"], fg="black"
            )

    def _update_title(self) -> None:
        self.title(self.session.title_text)

    def _show_tracker_selection(self) -> None:
        """Mirror the edit tracker's cell selection onto the sheet."""
        tracker = self.session.tracker
        self._syncing = True
        try:
            self.sheet.deselect("all", redraw=False)
            for row, col in tracker.selected_cells:
                self.sheet.add_cell_selection(
                    row, col, redraw=False, run_binding_func=False, set_as_current=False
                )
            if tracker.current_cell is not None:
                row, col = tracker.current_cell
                self.sheet.set_currently_selected(row, col)
                self.sheet.see(row, col)
            self.sheet.refresh()
        finally:
            self._syncing = False
        self._update_title()

    # --- Event handlers ---

    def _on_search_changed(self, *_args) -> None:
        self.session.set_query(self.search_var.get())

    def _on_sheet_select(self, event=None) -> None:
        if self._syncing:
            return

        tracker = self.session.tracker
        if tracker.is_edit_mode:
            current = self.sheet.get_currently_selected()
            if current:
                tracker.current_cell = (current.row, current.column)
            tracker.select_cells(sorted(self.sheet.get_selected_cells()))
            if current and tracker.anchor is None:
                tracker.anchor = tracker.current_cell
        else:
            rows = set(self.sheet.get_selected_rows())
            rows.update(row for row, _ in self.sheet.get_selected_cells())
            self.session.selected_rows = sorted(rows)
        self._update_title()

    def _on_header_click(self, event) -> None:
        col = self.sheet.identify_column(event)
        column = self.session.view.column_at(col) if col is not None else None
        if column is None:
            return
        self.session.click_header(column, shift=bool(event.state & SHIFT_MASK))

    def _on_f2(self, event=None) -> str:
        self.session.flush_query()
        tracker = self.session.tracker
        if tracker.is_edit_mode and tracker.selected_editable_cells():
            self._open_transform_prompt()
        else:
            self.session.toggle_edit_mode()
            self._apply_edit_styling()
            self.sheet.refresh()
            self._update_title()
        return "break"

    def _open_transform_prompt(self) -> None:
        cells = self.session.tracker.selected_editable_cells()
        row, col = cells[0]
        record = self.session.view.record_at(row)
        dialog = TransformDialog(
            self,
            cell_count=len(cells),
            sample_value=self.session.view.cell_display(row, col),
            sample_record=record,
        )
        spec = dialog.show()
        if spec is None:
            return
        changed = self.session.apply_transform(spec)
        logger.info(f"Transformed {changed} cell(s)")
        self._refresh_cells()

    def _refresh_cells(self) -> None:
        """Redraw cell text after in-place edits without changing the view."""
        view = self.session.view
        self._syncing = True
        try:
            self.sheet.set_sheet_data(
                view.get_rows(0, view.row_count),
                reset_col_positions=False,
                reset_row_positions=False,
                redraw=False,
            )
            self._apply_edit_styling()
        finally:
            self._syncing = False
        self._show_tracker_selection()

    def _on_return(self, event=None) -> str:
        self.session.flush_query()
        if not self.session.tracker.is_edit_mode:
            self._on_sheet_select()
        self.session.confirm()
        self._close_if_done()
        return "break"

    def _on_double_click(self, event=None) -> None:
        if self.session.tracker.is_edit_mode:
            return
        self.session.flush_query()
        self._on_sheet_select()
        self.session.finish_selection()
        self._close_if_done()

    def _on_escape(self, event=None) -> str:
        if self.session.escape():
            self._close_if_done()
        else:
            self._apply_edit_styling()
            self.sheet.refresh()
            self._update_title()
        return "break"

    def _on_arrow(self, event) -> str | None:
        tracker = self.session.tracker
        if not tracker.is_edit_mode:
            return None
        if tracker.current_cell is None:
            if self.session.view.row_count == 0:
                return "break"
            tracker.set_current_cell(0, 0)

        d_row, d_col = ARROWS[event.keysym]
        if event.state & SHIFT_MASK:
            tracker.extend_selection(d_row, d_col)
        elif event.state & CONTROL_MASK:
            tracker.add_to_selection(d_row, d_col)
        else:
            tracker.move_current_cell(d_row, d_col)
        self._show_tracker_selection()
        return "break"

    def _on_select_rows(self, event=None) -> str | None:
        if not self.session.tracker.is_edit_mode:
            return None
        self.session.tracker.select_rows_of_selection()
        self._show_tracker_selection()
        return "break"

    def _on_select_columns(self, event=None) -> str | None:
        if not self.session.tracker.is_edit_mode:
            return None
        self.session.tracker.select_columns_of_selection()
        self._show_tracker_selection()
        return "break"

    def _on_paste(self, event=None) -> str:
        if not self.session.tracker.is_edit_mode:
            return "break"
        try:
            text = self.clipboard_get()
        except tk.TclError:
            logger.info("Clipboard does not contain text data")
            return "break"
        pasted, skipped = self.session.paste(text)
        if skipped:
            logger.info(f"{skipped} cell(s) skipped: out of range or non-editable")
        if pasted:
            self._refresh_cells()
        return "break"

    def _on_export(self, event=None) -> str:
        path = filedialog.asksaveasfilename(
            parent=self,
            title="Export to CSV",
            defaultextension=".csv",
            filetypes=[("CSV Files", "*.csv"), ("All Files", "*.*")],
            initialfile="DataGridExport.csv",
        )
        if path:
            try:
                self.session.export_csv(path)
            except OSError as e:
                messagebox.showerror("Export Error", f"Error exporting: {e}", parent=self)
        return "break"

    def _on_delete(self, event=None) -> str:
        self.session.flush_query()
        self._on_sheet_select()
        self.session.delete_rows()
        return "break"

    def _on_focus_search(self, event=None) -> str:
        self.search_entry.focus_set()
        self.search_entry.select_range(0, tk.END)
        return "break"

    def _on_toggle_span(self, event=None) -> str:
        self._span_all_screens = not self._span_all_screens
        self._apply_geometry()
        return "break"

    def _on_search_key_down(self, event=None) -> str:
        """Down from the search box moves focus into the grid."""
        self.session.flush_query()
        if self.session.view.row_count:
            self.sheet.focus_set()
            if not self.session.tracker.is_edit_mode:
                self.sheet.select_row(0)
        return "break"

    def _close_if_done(self) -> None:
        if self.session.closed:
            self.destroy()

    def _on_close(self) -> None:
        self.session.cancel()
        self.destroy()

    # --- Setup ---

    def _apply_geometry(self) -> None:
        if self._span_all_screens:
            x, y = self.winfo_vrootx(), self.winfo_vrooty()
            width, height = self.winfo_vrootwidth(), self.winfo_vrootheight()
            self.geometry(f"{width}x{height}+{x}+{y}")
        else:
            self.geometry("1000x600")

    def _create_widgets(self) -> None:
        """Create the search box and the sheet."""
        search_frame = ttk.Frame(self)
        search_frame.pack(fill=tk.X, padx=5, pady=(5, 2))

        ttk.Label(search_frame, text="Search:").pack(side=tk.LEFT)
        self.search_var = tk.StringVar()
        self.search_entry = ttk.Entry(search_frame, textvariable=self.search_var)
        self.search_entry.pack(side=tk.LEFT, fill=tk.X, expand=True, padx=(5, 0))
        self.search_var.trace_add("write", self._on_search_changed)
        self.search_entry.bind("<Down>", self._on_search_key_down)

        self.sheet = Sheet(self, show_row_index=False, height=500, width=1000)
        self.sheet.pack(fill=tk.BOTH, expand=True, padx=5, pady=(2, 5))

        # Cells change only through the edit prompt and paste
        self.sheet.enable_bindings(
            "single_select",
            "drag_select",
            "ctrl_select",
            "shift_select",
            "row_select",
            "column_width_resize",
            "double_click_column_resize",
            "copy",
        )
        self.sheet.bind("<<SheetSelect>>", self._on_sheet_select)
        self.sheet.CH.bind("<ButtonRelease-1>", self._on_header_click, add="+")
        self.sheet.MT.bind("<Double-Button-1>", self._on_double_click, add="+")
        for key in ARROWS:
            for modifier in ("", "Shift-", "Control-"):
                self.sheet.MT.bind(f"<{modifier}{key}>", self._on_arrow)

    def _bind_keys(self) -> None:
        self.bind("<F2>", self._on_f2)
        self.bind("<Return>", self._on_return)
        self.bind("<Escape>", self._on_escape)
        self.bind("<Control-e>", self._on_export)
        self.bind("<Control-v>", self._on_paste)
        self.bind("<Alt-d>", self._on_focus_search)
        self.bind("<Alt-s>", self._on_toggle_span)
        self.sheet.MT.bind("<Delete>", self._on_delete)
        self.sheet.MT.bind("<Shift-space>", self._on_select_rows)
        self.sheet.MT.bind("<Control-space>", self._on_select_columns)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    def __init__(self, parent: tk.Misc, session: GridSession):
        """Initialize the grid window.

        Args:
            parent: Parent widget (usually the hidden Tk root)
            session: The session this window drives
        """
        super().__init__(parent)
        self.session = session
        self._syncing = False
        self._rendered_columns: list[str] | None = None
        self._span_all_screens = session.options.span_all_screens

        self._create_widgets()
        self._bind_keys()
        self._apply_geometry()

        session.on_view_changed.append(self._render)
        self._render()

        self.search_entry.focus_set()
