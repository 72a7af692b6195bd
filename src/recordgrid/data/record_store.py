"""Record store for one grid session.

Holds the full record list, the display columns, the stable identity table
and the search index. The store owns structural changes (removing records);
cell edits mutate records in place and never go through here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..models.record import IdentityTable
from ..services.search_index_service import SearchIndexService
from ..utils.debug_trace import get_logger, perf_timer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..models.record import Record

logger = get_logger(__name__)


class RecordStore:
    """In-memory working set of records plus identity and search index.

    Usage:
        store = RecordStore(records, ["Name", "Layer"])
        identity = store.identity_of(records[0])
        store.remove_records([records[0]])  # rebuilds the index
    """

    def __init__(self, records: list[Record], columns: list[str]):
        """Load records and build identities and the search index.

        Args:
            records: Records to display; the list is copied, the dicts are not
            columns: Display columns, in default order
        """
        self.records: list[Record] = list(records)
        self.columns: list[str] = list(columns)
        self.identities = IdentityTable()
        self.index = SearchIndexService()

        self.identities.assign_all(self.records)
        self.rebuild_index()

    def __len__(self) -> int:
        return len(self.records)

    def identity_of(self, record: Record) -> int:
        return self.identities.identity_of(record)

    def record_for(self, identity: int) -> Record | None:
        return self.identities.record_for(identity)

    def rebuild_index(self) -> None:
        """Rebuild the search index from the current record list."""
        with perf_timer("rebuild_index", row_count=len(self.records)):
            self.index.rebuild_index(self.records, self.columns, self.identities)

    def remove_records(self, records: Iterable[Record]) -> int:
        """Remove records (by reference) and rebuild the index.

        Identities of removed records are retired, never reused.

        Returns:
            Number of records removed
        """
        doomed = {id(record) for record in records}
        if not doomed:
            return 0

        before = len(self.records)
        self.records = [record for record in self.records if id(record) not in doomed]
        removed = before - len(self.records)

        if removed:
            self.rebuild_index()
            logger.debug(f"Removed {removed} records, {len(self.records)} remain")
        return removed
