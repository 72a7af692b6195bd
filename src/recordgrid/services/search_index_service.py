"""Search index service for fast free-text filtering.

Keeps two lowercase projections of every record, keyed by stable identity:
- Per column: identity -> column -> lowercase display string
- Whole row: identity -> all column values joined by spaces

Built once per session and rebuilt on structural changes (deletes). Cell
edits don't update the index; matching against an edited value can be stale
until the next rebuild, while display always reads the live record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models.record import cell_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..models.record import IdentityTable, Record


class SearchIndexService:
    """Maintains lowercase search projections of the record set.

    This service is stateful - it owns the index and must be rebuilt via
    rebuild_index() when records are added or removed.
    """

    def __init__(self) -> None:
        """Initialize an empty index."""
        self._by_column: dict[int, dict[str, str]] = {}
        self._all_columns: dict[int, str] = {}
        self._columns: list[str] = []

    def __len__(self) -> int:
        return len(self._all_columns)

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def rebuild_index(
        self, records: Iterable[Record], columns: list[str], identities: IdentityTable
    ) -> None:
        """Rebuild the index from scratch.

        Args:
            records: All records in the store
            columns: Columns to index (the session's display columns)
            identities: Identity table used to key entries
        """
        self._by_column.clear()
        self._all_columns.clear()
        self._columns = list(columns)

        for record in records:
            identity = identities.identity_of(record)
            column_values: dict[str, str] = {}
            row_parts: list[str] = []

            for column in self._columns:
                value = record.get(column)
                if value is None:
                    continue
                text = cell_text(value).lower()
                column_values[column] = text
                row_parts.append(text)

            self._by_column[identity] = column_values
            self._all_columns[identity] = " ".join(row_parts)

    def column_text(self, identity: int, column: str, record: Record | None = None) -> str:
        """Get the lowercase text of one cell.

        Args:
            identity: Record identity
            column: Column name
            record: Live record, used when the identity isn't indexed

        Returns:
            Lowercase cell text, "" if the cell is empty or missing
        """
        column_values = self._by_column.get(identity)
        if column_values is not None:
            return column_values.get(column, "")
        if record is not None:
            return cell_text(record.get(column)).lower()
        return ""

    def row_text(self, identity: int, record: Record | None = None) -> str:
        """Get the lowercase whole-row text.

        Args:
            identity: Record identity
            record: Live record, used when the identity isn't indexed
        """
        text = self._all_columns.get(identity)
        if text is not None:
            return text
        if record is not None:
            return " ".join(
                cell_text(record.get(c)).lower() for c in self._columns if record.get(c) is not None
            )
        return ""

