"""Parsed query structures for the filter engine.

A query string parses into a ParsedQuery: one or more FilterGroups combined
with OR. Each group is an AND of its row filters. Column visibility and
ordering directives don't filter rows; they shape the column layout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ComparisonOperator(Enum):
    GREATER_THAN = ">"
    LESS_THAN = "<"


@dataclass(frozen=True)
class ColumnMatcher:
    """Matches columns by header fragments.

    Attributes:
        parts: Lowercase fragments that must all appear in the header.
               An empty tuple matches every column.
        exact: True if the single part must equal the header (quoted form).
    """

    parts: tuple[str, ...] = ()
    exact: bool = False

    @property
    def matches_any_column(self) -> bool:
        return not self.parts


@dataclass(frozen=True)
class ColumnVisibilityFilter:
    column: ColumnMatcher


@dataclass(frozen=True)
class ColumnOrderDirective:
    column: ColumnMatcher
    position: int  # 1-based


@dataclass(frozen=True)
class ColumnValueFilter:
    column: ColumnMatcher
    value: str  # lowercase
    is_exclusion: bool = False
    is_glob: bool = False
    is_exact: bool = False


@dataclass(frozen=True)
class ComparisonFilter:
    """Numeric comparison against matching columns.

    value is None when the operand didn't parse as a number; such a filter
    never matches.
    """

    column: ColumnMatcher
    operator: ComparisonOperator
    value: float | None
    is_exclusion: bool = False


@dataclass(frozen=True)
class GeneralFilter:
    value: str  # lowercase
    is_glob: bool = False
    is_exact: bool = False


@dataclass
class FilterGroup:
    """Conjunction of filters. An empty group matches every record."""

    visibility: list[ColumnVisibilityFilter] = field(default_factory=list)
    ordering: list[ColumnOrderDirective] = field(default_factory=list)
    column_values: list[ColumnValueFilter] = field(default_factory=list)
    comparisons: list[ComparisonFilter] = field(default_factory=list)
    general: list[GeneralFilter] = field(default_factory=list)

    @property
    def has_row_filters(self) -> bool:
        return bool(self.column_values or self.comparisons or self.general)


@dataclass
class ParsedQuery:
    """Result of parsing one query string."""

    text: str = ""
    groups: list[FilterGroup] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.groups

    @property
    def has_row_filters(self) -> bool:
        return any(group.has_row_filters for group in self.groups)

    @property
    def visibility(self) -> list[ColumnVisibilityFilter]:
        """All visibility directives across groups, in declaration order."""
        return [f for group in self.groups for f in group.visibility]

    @property
    def ordering(self) -> list[ColumnOrderDirective]:
        """All ordering directives across groups, in declaration order."""
        return [d for group in self.groups for d in group.ordering]
