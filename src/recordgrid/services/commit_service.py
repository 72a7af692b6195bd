"""Commit pipeline: apply pending edits to their target objects.

Edits are grouped by the document that owns their record. The current
document's batch runs first, then each other document in the order its first
edit was made. Each batch runs under that document's lock. A failing edit
is recorded and skipped; a document whose lock can't be taken is skipped as
a whole. Pending edits are always cleared afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..data.host import DocumentUnavailableError, TargetNotFoundError, normalize_document_path
from ..models.constants import DOCUMENT_PATH_KEY, HANDLE_KEY, OBJECT_REF_KEY
from ..utils.debug_trace import get_logger, perf_timer
from .apply_handlers import default_registry

if TYPE_CHECKING:
    from ..data.edit_tracker import EditTracker, PendingEdit
    from ..data.host import RecordHost
    from .handler_registry import HandlerRegistry

logger = get_logger(__name__)


@dataclass
class CommitResult:
    """Outcome of one commit pass."""

    applied: int = 0
    processed: int = 0
    failures: int = 0
    skipped: int = 0
    diagnostics: list[str] = field(default_factory=list)

    @property
    def edits_applied(self) -> bool:
        return self.applied > 0

    def summary(self) -> str:
        text = f"Applied {self.applied} of {self.processed} edits"
        if self.failures:
            text += f", {self.failures} failed"
        if self.skipped:
            text += f", {self.skipped} skipped"
        return text


class CommitService:
    """Applies an edit tracker's pending edits through a host and handler registry."""

    def __init__(self, host: RecordHost, registry: HandlerRegistry | None = None):
        self._host = host
        self._registry = registry or default_registry()

    def document_path_of(self, edit: PendingEdit) -> str:
        path = edit.record.get(DOCUMENT_PATH_KEY)
        return normalize_document_path(path or self._host.current_document_path)

    def group_by_document(self, edits: list[PendingEdit]) -> dict[str, list[PendingEdit]]:
        """Group edits by owning document, current document first."""
        current = normalize_document_path(self._host.current_document_path)
        groups: dict[str, list[PendingEdit]] = {}
        if any(self.document_path_of(edit) == current for edit in edits):
            groups[current] = []

        for edit in edits:
            path = self.document_path_of(edit)
            groups.setdefault(path, []).append(edit)
            logger.debug(f"Grouped edit for {path}: {edit.column} = {edit.new_value!r}")
        return groups

    def resolve_target(self, document_path: str, edit: PendingEdit) -> Any:
        """Find the object an edit applies to.

        A cached object reference on the record is used for the current
        document; otherwise the record's handle is resolved through the host.

        Raises:
            TargetNotFoundError: If the record has no usable reference
        """
        record = edit.record
        cached = record.get(OBJECT_REF_KEY)
        if cached is not None and self._host.is_current(document_path):
            return cached

        handle = record.get(HANDLE_KEY)
        if handle is None or str(handle) == "":
            raise TargetNotFoundError("Record has no object reference or handle")
        return self._host.resolve_target(document_path, str(handle))

    def _apply_document(
        self, document_path: str, edits: list[PendingEdit], result: CommitResult
    ) -> None:
        try:
            with self._host.document_lock(document_path):
                for edit in edits:
                    self._apply_edit(document_path, edit, result)
        except DocumentUnavailableError as e:
            result.skipped += len(edits)
            message = f"Skipped {len(edits)} edit(s) for {document_path}: {e}"
            result.diagnostics.append(message)
            logger.warning(message)

    def _apply_edit(self, document_path: str, edit: PendingEdit, result: CommitResult) -> None:
        try:
            target = self.resolve_target(document_path, edit)
        except (TargetNotFoundError, DocumentUnavailableError) as e:
            result.skipped += 1
            message = f"Skipping edit {edit.column} = {edit.new_value!r}: {e}"
            result.diagnostics.append(message)
            logger.warning(message)
            return

        try:
            applied, message = self._registry.apply(
                target, edit.column, edit.new_value, dict(edit.record)
            )
        except Exception as e:
            result.failures += 1
            message = f"Error applying edit to {edit.column}: {e}"
            result.diagnostics.append(message)
            logger.warning(message)
            return

        if applied:
            result.applied += 1
            logger.debug(f"Applied {edit.column} = {edit.new_value!r} to {type(target).__name__}")
        else:
            result.diagnostics.append(message)

    def commit(self, tracker: EditTracker) -> CommitResult:
        """Apply every pending edit, then clear them.

        Returns:
            CommitResult with counts; committing nothing is a no-op
        """
        result = CommitResult()
        edits = tracker.pending
        if not edits:
            logger.debug("No pending edits to commit")
            return result

        try:
            with perf_timer("commit", row_count=len(edits)):
                groups = self.group_by_document(edits)
                logger.info(f"Committing {len(edits)} edit(s) across {len(groups)} document(s)")
                for document_path, document_edits in groups.items():
                    result.processed += len(document_edits)
                    self._apply_document(document_path, document_edits, result)
        finally:
            tracker.clear_pending()

        logger.info(result.summary())
        return result
