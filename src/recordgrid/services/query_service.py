"""Query parsing and evaluation for the grid filter box.

Grammar (case-insensitive):
- Commas (outside quotes) separate OR groups.
- Whitespace or ";" (outside quotes) separate ANDed tokens within a group.

Token shapes:
+----------------------+------------------------------------------------+
| Token                | Meaning                                        |
+----------------------+------------------------------------------------+
| $col / =col          | Show only matching columns                     |
| col@N                | Pin column to display position N (1-based)     |
| col>N / col<N / >N   | Numeric comparison (no column = any column)    |
| col:value            | Column contains value (* = glob, "" = exact)   |
| -col:value, -col>N   | Exclusion of the above                         |
| anything else        | Whole-row substring / glob / "exact" match     |
+----------------------+------------------------------------------------+

Column fragments may be dotted ("attr.dated") to require several parts, or
quoted for an exact header match.

Visibility and ordering directives are collected from the whole query and
only shape the column layout; they never filter rows.
"""

from __future__ import annotations

import operator
import re
from typing import TYPE_CHECKING

from ..filters import (
    contains_glob_wildcards,
    find_unquoted,
    header_matches,
    matches_glob,
    parse_number,
    split_outside_quotes,
    strip_quotes,
)
from ..models.filter_group import (
    ColumnMatcher,
    ColumnOrderDirective,
    ColumnValueFilter,
    ColumnVisibilityFilter,
    ComparisonFilter,
    ComparisonOperator,
    FilterGroup,
    GeneralFilter,
    ParsedQuery,
)
from ..models.record import format_column_header
from ..utils.debug_trace import get_logger, perf_timer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..models.record import IdentityTable, Record
    from .search_index_service import SearchIndexService

logger = get_logger(__name__)

GROUP_SEPARATORS = ","
TOKEN_SEPARATORS = " \t\r\n;"
VISIBILITY_PREFIXES = ("$", "=")
EXCLUSION_PREFIX = "-"

ORDER_PATTERN = re.compile(r"^(?P<column>.+)@(?P<position>\d+)$")

_COMPARE_OPS = {
    ComparisonOperator.GREATER_THAN: operator.gt,
    ComparisonOperator.LESS_THAN: operator.lt,
}


# --- Parsing ---


def parse_column_matcher(text: str) -> ColumnMatcher:
    """Build a column matcher from a (possibly quoted or dotted) fragment."""
    unquoted, quoted = strip_quotes(text.strip())
    lowered = unquoted.lower()
    if quoted:
        return ColumnMatcher(parts=(lowered,) if lowered else (), exact=bool(lowered))
    return ColumnMatcher(parts=tuple(part for part in lowered.split(".") if part))


def _parse_value(text: str) -> tuple[str, bool, bool]:
    """Parse a filter value.

    Returns:
        Tuple of (lowercase_value, is_glob, is_exact)
    """
    unquoted, quoted = strip_quotes(text)
    lowered = unquoted.lower()
    if quoted:
        return lowered, False, True
    return lowered, contains_glob_wildcards(lowered), False


def parse_token(token: str, group: FilterGroup) -> None:
    """Parse one token and add the resulting filter or directive to group."""
    # Column visibility: $col or =col
    if token.startswith(VISIBILITY_PREFIXES) and len(token) > 1:
        matcher = parse_column_matcher(token[1:])
        if not matcher.matches_any_column:
            group.visibility.append(ColumnVisibilityFilter(matcher))
            return

    # Column ordering: col@N
    order_match = ORDER_PATTERN.match(token)
    if order_match and find_unquoted(token, ":<>") == -1:
        matcher = parse_column_matcher(order_match.group("column"))
        if not matcher.matches_any_column:
            position = max(1, int(order_match.group("position")))
            group.ordering.append(ColumnOrderDirective(matcher, position))
            return

    is_exclusion = token.startswith(EXCLUSION_PREFIX) and len(token) > 1
    body = token[1:] if is_exclusion else token

    colon_idx = find_unquoted(body, ":")
    compare_idx = find_unquoted(body, "<>")

    # Numeric comparison: [col]>N, [col]<N
    if compare_idx >= 0 and (colon_idx == -1 or compare_idx < colon_idx):
        column_text = body[:compare_idx]
        operand = body[compare_idx + 1 :]
        group.comparisons.append(
            ComparisonFilter(
                column=parse_column_matcher(column_text),
                operator=ComparisonOperator(body[compare_idx]),
                value=parse_number(strip_quotes(operand)[0]),
                is_exclusion=is_exclusion,
            )
        )
        return

    # Column value: col:value
    if colon_idx > 0:
        matcher = parse_column_matcher(body[:colon_idx])
        if not matcher.matches_any_column:
            value, is_glob, is_exact = _parse_value(body[colon_idx + 1 :])
            group.column_values.append(
                ColumnValueFilter(
                    column=matcher,
                    value=value,
                    is_exclusion=is_exclusion,
                    is_glob=is_glob,
                    is_exact=is_exact,
                )
            )
            return

    # General filter (exclusion prefix has no meaning here, keep it literal)
    value, is_glob, is_exact = _parse_value(token)
    if value:
        group.general.append(GeneralFilter(value=value, is_glob=is_glob, is_exact=is_exact))


def parse_query(text: str | None) -> ParsedQuery:
    """Parse a query string into OR-combined filter groups.

    Never raises: malformed tokens degrade into filters that match nothing
    or into literal general filters.
    """
    parsed = ParsedQuery(text=text or "")
    if not text or not text.strip():
        return parsed

    for group_text in split_outside_quotes(text, GROUP_SEPARATORS):
        group = FilterGroup()
        for token in split_outside_quotes(group_text, TOKEN_SEPARATORS):
            parse_token(token, group)
        parsed.groups.append(group)

    return parsed


# --- Evaluation ---


def _value_matches(text: str, value: str, is_glob: bool, is_exact: bool) -> bool:
    if is_exact:
        return text == value
    if is_glob:
        return matches_glob(text, value)
    return value in text


class QueryService:
    """Evaluates parsed queries against records using the search index.

    Column matches are resolved once per filter pass, then each record is
    checked against the pre-resolved column lists.
    """

    def __init__(self, index: SearchIndexService, identities: IdentityTable):
        self._index = index
        self._identities = identities

    @staticmethod
    def matching_columns(matcher: ColumnMatcher, columns: Sequence[str]) -> list[str]:
        """List the columns a matcher selects, in column order."""
        return [
            column
            for column in columns
            if header_matches(matcher.parts, matcher.exact, format_column_header(column), column)
        ]

    def _column_value_passes(
        self, f: ColumnValueFilter, cols: list[str], identity: int, record: Record
    ) -> bool:
        found = any(
            _value_matches(
                self._index.column_text(identity, column, record), f.value, f.is_glob, f.is_exact
            )
            for column in cols
        )
        return not found if f.is_exclusion else found

    def _comparison_passes(
        self, f: ComparisonFilter, cols: list[str], identity: int, record: Record
    ) -> bool:
        if f.value is None:
            return False

        compare = _COMPARE_OPS[f.operator]
        satisfied = False
        for column in cols:
            number = parse_number(self._index.column_text(identity, column, record))
            if number is not None and compare(number, f.value):
                satisfied = True
                break

        return not satisfied if f.is_exclusion else satisfied

    def _general_passes(
        self, f: GeneralFilter, columns: Sequence[str], identity: int, record: Record
    ) -> bool:
        if f.is_exact:
            return any(self._index.column_text(identity, c, record) == f.value for c in columns)
        if f.is_glob:
            return any(
                matches_glob(self._index.column_text(identity, c, record), f.value)
                for c in columns
            )
        return f.value in self._index.row_text(identity, record)

    def group_matches(
        self,
        group: FilterGroup,
        record: Record,
        columns: Sequence[str],
        resolved: dict[int, list[str]] | None = None,
    ) -> bool:
        """Check whether a record passes every filter in a group.

        Args:
            group: The filter group
            record: Record to test
            columns: All filterable columns
            resolved: Optional cache of id(filter) -> matching columns
        """
        if resolved is None:
            resolved = self._resolve_columns([group], columns)

        identity = self._identities.identity_of(record)

        for f in group.column_values:
            if not self._column_value_passes(f, resolved[id(f)], identity, record):
                return False

        for f in group.comparisons:
            if not self._comparison_passes(f, resolved[id(f)], identity, record):
                return False

        for f in group.general:
            if not self._general_passes(f, columns, identity, record):
                return False

        return True

    def _resolve_columns(
        self, groups: list[FilterGroup], columns: Sequence[str]
    ) -> dict[int, list[str]]:
        resolved: dict[int, list[str]] = {}
        for group in groups:
            for f in [*group.column_values, *group.comparisons]:
                resolved[id(f)] = self.matching_columns(f.column, columns)
        return resolved

    def filter_records(
        self, records: Sequence[Record], columns: Sequence[str], parsed: ParsedQuery
    ) -> list[Record]:
        """Return the records passing any group, in store order.

        An empty query, or one made only of directives, returns every record.
        """
        if parsed.is_empty or not parsed.has_row_filters:
            return list(records)

        with perf_timer("filter_records", row_count=len(records)):
            resolved = self._resolve_columns(parsed.groups, columns)
            result = [
                record
                for record in records
                if any(self.group_matches(g, record, columns, resolved) for g in parsed.groups)
            ]

        logger.debug(f"Query {parsed.text!r} matched {len(result)} of {len(records)} records")
        return result

    def resolve_column_layout(self, columns: Sequence[str], parsed: ParsedQuery) -> list[str]:
        """Compute displayed columns and their order for a query.

        Visibility directives are ORed into the shown set; if none match any
        column the default set is kept. Ordering directives then pin columns
        to positions. The first directive to claim a position wins it, a
        column keeps its first pin, and positions past the end land on the
        last slot.
        """
        visible = list(columns)

        if parsed.visibility:
            shown = [
                column
                for column in columns
                if any(
                    header_matches(
                        f.column.parts, f.column.exact, format_column_header(column), column
                    )
                    for f in parsed.visibility
                )
            ]
            if shown:
                visible = shown

        if not parsed.ordering or not visible:
            return visible

        slot_count = len(visible)
        slots: dict[int, str] = {}
        placed: set[str] = set()

        for directive in parsed.ordering:
            slot = min(directive.position, slot_count) - 1
            if slot in slots:
                continue
            candidates = [
                c for c in self.matching_columns(directive.column, visible) if c not in placed
            ]
            if not candidates:
                continue
            slots[slot] = candidates[0]
            placed.add(candidates[0])

        remaining = iter(column for column in visible if column not in placed)
        return [slots[i] if i in slots else next(remaining) for i in range(slot_count)]
