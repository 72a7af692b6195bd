"""Record helpers and the per-session stable identity table.

A record is a plain dict mapping column name to a str/int/float/bool value.
Records are mutated in place by cell edits, so every view that references a
record sees edits immediately.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from .constants import EDITABLE_COLUMNS, EDITABLE_PREFIXES

if TYPE_CHECKING:
    from collections.abc import Iterable

CellValue = Union[str, int, float, bool, None]
Record = dict[str, CellValue]


def cell_text(value: CellValue) -> str:
    """Convert a cell value to its display string (None -> "")."""
    if value is None:
        return ""
    return str(value)


def format_column_header(column_name: str) -> str:
    """Format a column name for display as a header.

    Underscores become spaces, a space is inserted before an uppercase letter
    that follows a non-uppercase one, and everything is lowercased.

    Examples:
        - "DocumentPath" -> "document path"
        - "attr_DATED" -> "attr dated"
        - "ObjectID" -> "object id"
    """
    if not column_name:
        return column_name

    result = []
    prev = ""
    for char in column_name:
        if char == "_":
            result.append(" ")
        elif prev and char.isupper() and not prev.isupper() and prev != "_":
            result.append(" ")
            result.append(char.lower())
        else:
            result.append(char.lower())
        prev = char
    return "".join(result)


def is_column_editable(column_name: str) -> bool:
    """Check if a column is on the edit allow-list (exact name or prefix family)."""
    lower_name = column_name.lower()
    if lower_name in EDITABLE_COLUMNS:
        return True
    return lower_name.startswith(EDITABLE_PREFIXES)


class IdentityTable:
    """Assigns session-scoped stable identities to record objects.

    Identity follows the object, not its content: two equal dicts get
    different identities, and an edited record keeps its identity. The table
    holds a strong reference to every record it has seen so object ids can't
    be recycled while the session is alive.
    """

    def __init__(self) -> None:
        self._next_identity = 1
        self._by_object_id: dict[int, int] = {}
        self._records: dict[int, Record] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identity: object) -> bool:
        return identity in self._records

    def identity_of(self, record: Record) -> int:
        """Get the identity of a record, assigning a new one on first sight."""
        object_id = id(record)
        identity = self._by_object_id.get(object_id)
        if identity is None:
            identity = self._next_identity
            self._next_identity += 1
            self._by_object_id[object_id] = identity
            self._records[identity] = record
        return identity

    def peek(self, record: Record) -> int | None:
        """Get the identity of a record without assigning one."""
        return self._by_object_id.get(id(record))

    def record_for(self, identity: int) -> Record | None:
        """Look up the record that owns an identity."""
        return self._records.get(identity)

    def assign_all(self, records: Iterable[Record]) -> None:
        """Assign identities to every record not yet observed."""
        for record in records:
            self.identity_of(record)
