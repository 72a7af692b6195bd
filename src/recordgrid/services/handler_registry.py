"""Registry of apply handlers keyed by (column, target variant).

The same column name means different things for different targets: "name"
renames a layout, retitles a text entity, or renames a block definition.
Handlers are registered per column (or per column prefix family) and per
target class; lookup walks the target's MRO so a handler registered for a
base class covers its subclasses unless a subclass has its own.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..utils.debug_trace import get_logger

logger = get_logger(__name__)

# handler(target, column, new_value, siblings) -> None; raise to report failure
ApplyHandler = Callable[[Any, str, str, Mapping[str, Any]], None]


class HandlerRegistry:
    """Table of (column, variant) -> handler with a no-op default.

    Usage:
        registry = HandlerRegistry()

        @registry.register("layer", Entity)
        def apply_layer(target, column, value, siblings):
            target.layer = value

        applied, message = registry.apply(circle, "Layer", "A-WALL", record)
    """

    def __init__(self) -> None:
        self._by_column: dict[str, list[tuple[type, ApplyHandler]]] = {}
        self._by_prefix: list[tuple[str, type, ApplyHandler]] = []

    def register(
        self, columns: str | Iterable[str], variant: type = object
    ) -> Callable[[ApplyHandler], ApplyHandler]:
        """Decorator registering a handler for one or more column names."""
        names = [columns] if isinstance(columns, str) else list(columns)

        def decorator(handler: ApplyHandler) -> ApplyHandler:
            for name in names:
                self.add(name, variant, handler)
            return handler

        return decorator

    def register_prefix(
        self, prefix: str, variant: type = object
    ) -> Callable[[ApplyHandler], ApplyHandler]:
        """Decorator registering a handler for every column starting with prefix."""

        def decorator(handler: ApplyHandler) -> ApplyHandler:
            self._by_prefix.append((prefix.lower(), variant, handler))
            return handler

        return decorator

    def add(self, column: str, variant: type, handler: ApplyHandler) -> None:
        """Register a handler; a later registration for the same pair replaces it."""
        entries = self._by_column.setdefault(column.lower(), [])
        entries[:] = [(v, h) for v, h in entries if v is not variant]
        entries.append((variant, handler))

    def _candidates(self, column: str) -> list[tuple[type, ApplyHandler]]:
        lower = column.lower()
        if lower in self._by_column:
            return self._by_column[lower]
        return [
            (variant, handler)
            for prefix, variant, handler in self._by_prefix
            if lower.startswith(prefix)
        ]

    def find(self, target: Any, column: str) -> ApplyHandler | None:
        """Find the most specific handler for a target and column."""
        candidates = self._candidates(column)
        if not candidates:
            return None
        for cls in type(target).__mro__:
            for variant, handler in candidates:
                if variant is cls:
                    return handler
        return None

    def apply(
        self, target: Any, column: str, value: str, siblings: Mapping[str, Any] | None = None
    ) -> tuple[bool, str]:
        """Apply an edit to a target.

        Exceptions raised by the handler propagate to the caller.

        Returns:
            Tuple of (applied, message). An unknown (column, variant) pair is
            a no-op that returns False with a diagnostic.
        """
        handler = self.find(target, column)
        if handler is None:
            message = f"No handler for column '{column}' on {type(target).__name__}"
            logger.info(message)
            return False, message

        handler(target, column, value, siblings or {})
        return True, ""
