"""Grid session: the explicit context object for one modal run of the grid.

Owns the record store, query and sort state, the view, the edit tracker and
the commit pipeline. The window drives it; nothing here touches Tk apart
from the optional scheduler used for debouncing.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from ..models.constants import SEARCH_TEXT_KEY
from ..services.clipboard_service import paste
from ..services.commit_service import CommitResult, CommitService
from ..services.export_service import export_csv
from ..services.query_service import QueryService, parse_query
from ..services.sort_service import SortService
from ..settings import EngineSettings, SessionOptions
from ..utils.debounce import Debouncer
from ..utils.debug_trace import get_logger, log_perf
from .edit_tracker import EditTracker
from .record_store import RecordStore
from .view_controller import ViewController

if TYPE_CHECKING:
    from ..models.record import Record
    from ..services.handler_registry import HandlerRegistry
    from ..services.transform_service import TransformSpec
    from ..utils.debounce import Scheduler
    from .host import RecordHost

logger = get_logger(__name__)


class GridSession:
    """State and operations of one grid session.

    Usage:
        session = GridSession(records, ["Name", "Layer"], host=host)
        session.set_query("layer:A-WALL")
        session.toggle_edit_mode()
        session.tracker.edit_cell(0, "Layer", "A-DOOR")
        session.confirm()  # commits, session.result holds touched records
    """

    def __init__(
        self,
        records: list[Record],
        columns: list[str],
        options: SessionOptions | None = None,
        host: RecordHost | None = None,
        registry: HandlerRegistry | None = None,
        settings: EngineSettings | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.options = options or SessionOptions()
        self.settings = settings or EngineSettings()
        self.host = host

        self.store = RecordStore(records, columns)
        self.view = ViewController(columns)
        self.query_service = QueryService(self.store.index, self.store.identities)
        self.sort_service = SortService(self.settings.max_sort_criteria)
        self.tracker = EditTracker(
            self.view, self.store.identities, self.settings.is_column_editable
        )
        self.commit_service = CommitService(host, registry) if host is not None else None

        self.query_text = ""
        self.parsed_query = parse_query("")
        self.edits_applied = False
        self.last_commit: CommitResult | None = None
        self.result: list[Record] = []
        self.closed = False
        self.selected_rows: list[int] = []

        # Called after the view changes; the window re-renders from here
        self.on_view_changed: list[Callable[[], None]] = []

        self._debouncer = (
            Debouncer(scheduler, self.settings.debounce_delay_ms, self.refresh)
            if scheduler is not None
            else None
        )

        self.refresh()
        self.selected_rows = [
            row for row in self.options.initial_selection if 0 <= row < self.view.row_count
        ]

    # --- Query and sort ---

    def set_query(self, text: str) -> None:
        """Update the query text; large record sets re-filter after a pause."""
        self.query_text = text
        if self._debouncer is not None and self.settings.should_debounce(len(self.store)):
            self._debouncer.trigger()
        else:
            self.refresh()

    def flush_query(self) -> None:
        """Apply a debounced query immediately.

        Everything that reads rows by view index calls this first, so a pending
        query never leaves indexes pointing into the previous view.
        """
        if self._debouncer is not None:
            self._debouncer.flush()

    @log_perf
    def refresh(self) -> None:
        """Recompute the view from the current query and sort criteria."""
        if self._debouncer is not None:
            self._debouncer.cancel()
        self.parsed_query = parse_query(self.query_text)
        filtered = self.query_service.filter_records(
            self.store.records, self.store.columns, self.parsed_query
        )
        rows = self.sort_service.sort_records(filtered)
        columns = self.query_service.resolve_column_layout(self.store.columns, self.parsed_query)

        self.view.set_view(rows, columns)
        self.tracker.reset_selection()
        self.selected_rows = []

        for callback in self.on_view_changed:
            callback()

    def click_header(self, column: str, shift: bool = False) -> None:
        self.sort_service.click_header(column, shift)
        self.refresh()

    # --- Edit mode ---

    def toggle_edit_mode(self) -> None:
        self.tracker.toggle_edit_mode()

    def paste(self, text: str) -> tuple[int, int]:
        self.flush_query()
        return paste(self.tracker, text)

    def apply_transform(self, spec: TransformSpec) -> int:
        self.flush_query()
        return self.tracker.apply_transform_to_selection(spec)

    def pending_cells(self) -> list[tuple[int, int]]:
        """View cells (row, col) holding uncommitted edits.

        Edits are found by record reference, so the cells follow their records
        through any re-filter or re-sort. Edits on hidden rows are skipped.
        """
        cells = []
        for edit in self.tracker.pending:
            row = self.view.row_index_of(edit.record)
            col = self.view.column_index(edit.column)
            if row is not None and col is not None:
                cells.append((row, col))
        return cells

    def commit(self) -> CommitResult:
        """Commit pending edits through the host.

        Without a host the in-memory values are the final result; pending
        edits are accepted as applied.
        """
        if self.commit_service is not None:
            result = self.commit_service.commit(self.tracker)
        else:
            count = self.tracker.pending_count
            result = CommitResult(applied=count, processed=count)
            self.tracker.clear_pending()

        self.last_commit = result
        if result.edits_applied:
            self.edits_applied = True
        return result

    # --- Session outcomes ---

    def _close(self, result: list[Record]) -> list[Record]:
        if self._debouncer is not None:
            self._debouncer.cancel()
        self.result = result
        self.closed = True
        return result

    def selected_records(self, rows: Sequence[int] | None = None) -> list[Record]:
        self.flush_query()
        rows = self.selected_rows if rows is None else rows
        return [record for record in map(self.view.record_at, rows) if record is not None]

    def finish_selection(self, rows: Sequence[int] | None = None) -> list[Record]:
        """Close with the selected rows (or the touched records in edit mode)."""
        self.flush_query()
        if self.tracker.is_edit_mode:
            return self._close(self.tracker.touched_records)
        return self._close(self.selected_records(rows))

    def create_from_search(self) -> list[Record] | None:
        """Close with a synthetic record carrying the search text, if allowed."""
        self.flush_query()
        text = self.query_text.strip()
        if not self.options.allow_create_from_search or not text:
            return None
        return self._close([{SEARCH_TEXT_KEY: text}])

    def confirm(self, rows: Sequence[int] | None = None) -> list[Record]:
        """Enter: commit pending edits, create from search, or finish selection."""
        self.flush_query()
        rows = self.selected_rows if rows is None else rows

        if self.tracker.is_edit_mode and self.tracker.has_pending:
            self.commit()
            return self._close(self.tracker.touched_records)

        if not rows and not self.tracker.is_edit_mode:
            created = self.create_from_search()
            if created is not None:
                return created

        return self.finish_selection(rows)

    def escape(self) -> bool:
        """Escape: leave edit mode, or cancel the session.

        Returns:
            True if the session was closed
        """
        if self.tracker.is_edit_mode:
            self.toggle_edit_mode()
            return False
        self.cancel()
        return True

    def cancel(self) -> None:
        """Close without committing; pending edits are rolled back in memory."""
        discarded = self.tracker.discard()
        if discarded:
            logger.info(f"Discarded {discarded} pending edit(s)")
        self._close([])

    def delete_rows(self, rows: Sequence[int] | None = None) -> int:
        """Delete selected rows through the host's delete callback.

        Returns:
            Number of records removed from the session
        """
        if self.tracker.is_edit_mode or self.options.on_delete is None:
            return 0

        records = self.selected_records(rows)
        if not records:
            return 0
        if not self.options.on_delete(records):
            return 0

        removed = self.store.remove_records(records)
        self.refresh()
        return removed

    def export_csv(self, path: str) -> int:
        """Export the visible rows and columns in display order."""
        self.flush_query()
        return export_csv(path, self.view.rows, self.view.columns)

    # --- Display ---

    @property
    def title_text(self) -> str:
        selected = (
            len(self.tracker.selected_cells)
            if self.tracker.is_edit_mode
            else len(self.selected_rows)
        )
        title = (
            f"{self.options.title} - Selected: {selected}, "
            f"Filtered: {self.view.row_count}, Total: {len(self.store)}"
        )
        if self.tracker.is_edit_mode:
            title += " [EDIT MODE]"
        return title
