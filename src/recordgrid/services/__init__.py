"""Service layer for the grid engine.

Services hold the query, sort, edit and commit logic so the window only
forwards events. All of them operate on plain Record dicts.

Services:
- SearchIndexService: per-record search text with a column mask (stateful)
- QueryService: query parsing and record/column filtering
- SortService: multi-column natural sort criteria (stateful)
- HandlerRegistry: (column, target type) -> apply handler dispatch
- CommitService: apply pending edits per document under the document lock
- transform_service / clipboard_service / export_service: stateless helpers
"""

from .commit_service import CommitResult, CommitService
from .handler_registry import HandlerRegistry
from .query_service import QueryService, parse_query
from .search_index_service import SearchIndexService
from .sort_service import SortService

__all__ = [
    "CommitResult",
    "CommitService",
    "HandlerRegistry",
    "QueryService",
    "SearchIndexService",
    "SortService",
    "parse_query",
]
