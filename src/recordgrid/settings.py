from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .models.constants import (
    AUTO_SIZE_MAX_COLUMNS,
    COLOR_EDITABLE_HEADER_BG,
    COLOR_PENDING_CELL_BG,
    COLOR_READONLY_CELL_BG,
    COLOR_READONLY_CELL_FG,
    COLOR_READONLY_HEADER_BG,
    COLOR_READONLY_HEADER_FG,
    DEBOUNCE_DELAY_MS,
    DEBOUNCE_RECORD_THRESHOLD,
    EDITABLE_COLUMNS,
    EDITABLE_PREFIXES,
    MAX_SORT_CRITERIA,
)
from .models.record import Record


@dataclass
class SessionOptions:
    """Per-session options passed in by the host shell."""

    span_all_screens: bool = False
    initial_selection: Sequence[int] = ()
    # Called with the records the user asked to delete; return True to remove them
    on_delete: Callable[[list[Record]], bool] | None = None
    allow_create_from_search: bool = False
    title: str = "Records"


@dataclass
class EngineSettings:
    """Engine limits, edit allow-list and edit-mode colors."""

    debounce_record_threshold: int = DEBOUNCE_RECORD_THRESHOLD
    debounce_delay_ms: int = DEBOUNCE_DELAY_MS
    max_sort_criteria: int = MAX_SORT_CRITERIA
    auto_size_max_columns: int = AUTO_SIZE_MAX_COLUMNS
    editable_columns: frozenset[str] = EDITABLE_COLUMNS
    editable_prefixes: tuple[str, ...] = EDITABLE_PREFIXES
    colors: dict[str, str] = field(
        default_factory=lambda: {
            "editable_header_bg": COLOR_EDITABLE_HEADER_BG,
            "readonly_header_bg": COLOR_READONLY_HEADER_BG,
            "readonly_header_fg": COLOR_READONLY_HEADER_FG,
            "readonly_cell_bg": COLOR_READONLY_CELL_BG,
            "readonly_cell_fg": COLOR_READONLY_CELL_FG,
            "pending_cell_bg": COLOR_PENDING_CELL_BG,
        }
    )

    def is_column_editable(self, column_name: str) -> bool:
        lower_name = column_name.lower()
        return lower_name in self.editable_columns or lower_name.startswith(
            self.editable_prefixes
        )

    def should_debounce(self, record_count: int) -> bool:
        return record_count > self.debounce_record_threshold
