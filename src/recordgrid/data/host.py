"""Host interface: where committed edits go.

The grid engine never talks to a document model directly. A RecordHost
resolves persistent handles to target objects and provides the per-document
lock the commit pipeline holds while applying a batch of edits.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ..utils.debug_trace import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from ..models.targets import Document

logger = get_logger(__name__)


class DocumentUnavailableError(RuntimeError):
    """A document is not open or its lock can't be acquired."""


class TargetNotFoundError(LookupError):
    """A persistent handle doesn't resolve to an object in its document."""


def normalize_document_path(path: str | None) -> str:
    """Normalize a document path for grouping (absolute, case-folded on Windows)."""
    if not path:
        return ""
    return os.path.normcase(os.path.abspath(str(path)))


class RecordHost(ABC):
    """Abstract host that owns the documents records come from."""

    @property
    @abstractmethod
    def current_document_path(self) -> str:
        """Path of the active document; records without a DocumentPath belong to it."""
        pass

    @abstractmethod
    def resolve_target(self, document_path: str, handle: str) -> Any:
        """Resolve a persistent handle to a target object.

        Raises:
            DocumentUnavailableError: If the document isn't open
            TargetNotFoundError: If nothing in the document has that handle
        """
        pass

    @abstractmethod
    def document_lock(self, document_path: str):
        """Context manager holding the document's write lock.

        Raises:
            DocumentUnavailableError: If the lock can't be acquired
        """
        pass

    def is_current(self, document_path: str) -> bool:
        return normalize_document_path(document_path) == normalize_document_path(
            self.current_document_path
        )


class InMemoryHost(RecordHost):
    """Host backed by in-memory Documents.

    Usage:
        drawing = Document("/work/plan.dwg")
        circle = drawing.add(Circle(radius=2.0))
        host = InMemoryHost([drawing])
        records = [{"Handle": circle.handle, "Radius": 2.0}]
    """

    def __init__(self, documents: Iterable[Document], current_path: str | None = None):
        self._documents: dict[str, Document] = {}
        for document in documents:
            self._documents[normalize_document_path(document.path)] = document

        if current_path is None and self._documents:
            current_path = next(iter(self._documents.values())).path
        self._current_path = current_path or ""
        self._locked: set[str] = set()
        self.lock_log: list[str] = []

    @property
    def current_document_path(self) -> str:
        return self._current_path

    def get_document(self, document_path: str) -> Document:
        document = self._documents.get(normalize_document_path(document_path))
        if document is None:
            raise DocumentUnavailableError(f"Document not found or not open: {document_path}")
        return document

    def resolve_target(self, document_path: str, handle: str) -> Any:
        document = self.get_document(document_path)
        target = document.get(str(handle))
        if target is None:
            raise TargetNotFoundError(f"Handle {handle} not found in {document.path}")
        return target

    @contextmanager
    def document_lock(self, document_path: str) -> Iterator[Document]:
        key = normalize_document_path(document_path)
        document = self.get_document(document_path)
        if key in self._locked:
            raise DocumentUnavailableError(f"Document is already locked: {document_path}")

        self._locked.add(key)
        self.lock_log.append(document.path)
        logger.debug(f"Locked {document.path}")
        try:
            yield document
        finally:
            self._locked.discard(key)
            logger.debug(f"Unlocked {document.path}")

    def lock_externally(self, document_path: str) -> None:
        """Mark a document as locked by someone else (its commits will fail)."""
        self._locked.add(normalize_document_path(document_path))
