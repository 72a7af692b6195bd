"""Text matching primitives for the query language.

Everything here is case-insensitive and never raises on malformed input:
a pattern that can't be compiled simply matches nothing.
"""

import re
from functools import lru_cache

QUOTE = '"'

# Signed decimal with optional exponent (no thousands separators)
NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def strip_quotes(text):
    """Strip surrounding double quotes.

    A balanced pair is removed. An unmatched leading or trailing quote is
    removed on its own and the rest is taken literally.

    Returns:
        Tuple of (unquoted_text, was_quoted)
    """
    if len(text) >= 2 and text.startswith(QUOTE) and text.endswith(QUOTE):
        return text[1:-1], True
    if text.startswith(QUOTE):
        return text[1:], False
    if text.endswith(QUOTE):
        return text[:-1], False
    return text, False


def contains_glob_wildcards(pattern):
    return pattern is not None and "*" in pattern


@lru_cache(maxsize=512)
def compile_glob(pattern):
    """Compile a glob into an anchored, case-insensitive regex.

    Only "*" is special. Returns None if the pattern can't compile.
    """
    escaped = re.escape(pattern.lower()).replace(r"\*", ".*")
    try:
        return re.compile(f"^{escaped}$", re.DOTALL)
    except re.error:
        return None


def matches_glob(value, pattern):
    """Check a lowercase value against a glob pattern.

    Without wildcards this is a plain substring test.
    """
    if not value or not pattern:
        return False
    if "*" not in pattern:
        return pattern.lower() in value
    compiled = compile_glob(pattern)
    if compiled is None:
        return False
    return compiled.match(value) is not None


def parse_number(text):
    """Parse a decimal number, returning None instead of raising."""
    if text is None:
        return None
    if isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return float(text)
    stripped = str(text).strip()
    if not NUMBER_PATTERN.match(stripped):
        return None
    try:
        return float(stripped)
    except ValueError:
        return None


def split_outside_quotes(text, separators):
    """Split text on any separator character that isn't inside double quotes.

    Empty pieces are dropped. Quote characters are kept in the pieces so
    callers can tell quoted tokens apart.
    """
    pieces = []
    current = []
    in_quotes = False

    for char in text:
        if char == QUOTE:
            in_quotes = not in_quotes
            current.append(char)
        elif char in separators and not in_quotes:
            if current:
                pieces.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        pieces.append("".join(current))

    return [piece for piece in (p.strip() for p in pieces) if piece]


def find_unquoted(text, chars):
    """Find the index of the first char in chars that isn't inside quotes, or -1."""
    in_quotes = False
    for i, char in enumerate(text):
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char in chars and not in_quotes:
            return i
    return -1


def header_matches(parts, exact, header, column_name):
    """Check whether a column matches a set of header fragments.

    Args:
        parts: Lowercase fragments; all must appear in the header
        exact: If True, the single fragment must equal the header
        header: Formatted header text (e.g. "document path")
        column_name: Raw column name (e.g. "DocumentPath")
    """
    if not parts:
        return True

    header_lower = header.lower()
    name_lower = column_name.lower()

    if exact:
        target = " ".join(parts)
        return target in (header_lower, name_lower)

    return all(
        part in header_lower or part in name_lower or part.replace("_", " ") in header_lower
        for part in parts
    )
