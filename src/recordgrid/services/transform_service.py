"""Cell value transforms used by the bulk edit prompt.

A transform runs three optional steps in order:
1. Find/replace (literal, or regex with literal fallback). With no find text,
   a replace text replaces the whole value.
2. Pattern: "{}" is the current value and $"Column Name" pulls a sibling
   column's value from the same record.
3. Math: x+n, x-n, x*n, x/n, nx, -x applied to the value if it is a number,
   otherwise to every number embedded in the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..filters import parse_number
from ..models.record import cell_text

if TYPE_CHECKING:
    from ..models.record import Record

DATA_REFERENCE_PATTERN = re.compile(r'\$"([^"]+)"')
EMBEDDED_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
CURRENT_VALUE_TOKEN = "{}"


@dataclass
class TransformSpec:
    """Settings collected from the bulk edit prompt."""

    find_text: str = ""
    replace_text: str = ""
    pattern_text: str = ""
    math_operation: str = ""
    regex_mode: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.find_text or self.replace_text or self.pattern_text or self.math_operation)


def format_number(value: float) -> str:
    """Format a math result: whole numbers lose their decimal part."""
    if abs(value % 1) < 1e-10:
        return str(int(round(value)))
    return format(value, ".15g")


def apply_math_operation(x: float, math_op: str) -> float:
    """Apply a math operation string to a number.

    Supported forms (spaces ignored, case-insensitive "x"):
        x, -x, 2x, x+5, x-5, x*2, x/2

    Unrecognized operations and division by zero return x unchanged.
    """
    if not math_op or not math_op.strip():
        return x

    op_text = math_op.replace(" ", "").lower()
    if op_text == "x":
        return x
    if op_text == "-x":
        return -x

    if not op_text.startswith("x") and op_text.endswith("x"):
        multiplier = parse_number(op_text[:-1])
        if multiplier is not None:
            return multiplier * x

    if op_text.startswith("x") and len(op_text) >= 3:
        operand = parse_number(op_text[2:])
        if operand is not None:
            op = op_text[1]
            if op == "+":
                return x + operand
            if op == "-":
                return x - operand
            if op == "*":
                return x * operand
            if op == "/":
                return x if operand == 0 else x / operand

    return x


def apply_math_to_numbers_in_string(text: str, math_op: str) -> str:
    """Apply a math operation to each number embedded in text."""
    if not text or not math_op or not math_op.strip():
        return text

    def replace(match: re.Match) -> str:
        number = parse_number(match.group(0))
        if number is None:
            return match.group(0)
        return format_number(apply_math_operation(number, math_op))

    return EMBEDDED_NUMBER_PATTERN.sub(replace, text)


def _normalized(key: str) -> str:
    return key.replace(" ", "").replace("_", "").lower()


def get_data_value_from_row(record: Record | None, key: str) -> str:
    """Look up a sibling column value by a loosely written name.

    Tries, in order: exact key, case-insensitive key, spaces as underscores,
    underscores as spaces, and finally names with all spaces and underscores
    removed. Returns "" if nothing matches or the value is None.
    """
    if not record or not key:
        return ""

    value = record.get(key)
    if value is not None:
        return cell_text(value)

    candidates = [key.lower()]
    with_underscores = key.replace(" ", "_")
    if with_underscores != key:
        candidates.append(with_underscores.lower())
    with_spaces = key.replace("_", " ")
    if with_spaces != key:
        candidates.append(with_spaces.lower())

    for candidate in candidates:
        for column, value in record.items():
            if column.lower() == candidate and value is not None:
                return cell_text(value)

    target = _normalized(key)
    for column, value in record.items():
        if _normalized(column) == target and value is not None:
            return cell_text(value)

    return ""


def parse_pattern_with_data_references(
    pattern: str, current_value: str, record: Record | None
) -> str:
    """Expand "{}" and $"Column Name" references in a pattern.

    A reference that resolves to an empty value is left as written.
    """
    if not pattern:
        return current_value

    result = pattern.replace(CURRENT_VALUE_TOKEN, current_value)

    def replace(match: re.Match) -> str:
        data_value = get_data_value_from_row(record, match.group(1))
        return data_value if data_value else match.group(0)

    return DATA_REFERENCE_PATTERN.sub(replace, result)


def _find_replace(value: str, spec: TransformSpec) -> str:
    if spec.find_text:
        if spec.regex_mode:
            try:
                return re.sub(spec.find_text, spec.replace_text, value)
            except re.error:
                pass
        return value.replace(spec.find_text, spec.replace_text)
    if spec.replace_text:
        return spec.replace_text
    return value


def transform_value(original: str | None, spec: TransformSpec, record: Record | None = None) -> str:
    """Run find/replace, pattern and math steps on one cell value."""
    value = original or ""

    value = _find_replace(value, spec)

    if spec.pattern_text:
        if record is not None:
            value = parse_pattern_with_data_references(spec.pattern_text, value, record)
        else:
            value = spec.pattern_text.replace(CURRENT_VALUE_TOKEN, value)

    if spec.math_operation:
        number = parse_number(value)
        if number is not None:
            value = format_number(apply_math_operation(number, spec.math_operation))
        else:
            value = apply_math_to_numbers_in_string(value, spec.math_operation)

    return value
