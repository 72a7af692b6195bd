"""Tests for the text matching primitives."""

from recordgrid.filters import (
    find_unquoted,
    header_matches,
    matches_glob,
    parse_number,
    split_outside_quotes,
    strip_quotes,
)


class TestStripQuotes:
    def test_balanced(self):
        assert strip_quotes('"A-WALL"') == ("A-WALL", True)

    def test_unmatched_leading_quote(self):
        assert strip_quotes('"A-WALL') == ("A-WALL", False)

    def test_unquoted(self):
        assert strip_quotes("wall") == ("wall", False)


class TestMatchesGlob:
    """Glob matching works on lowercase values."""

    def test_prefix_glob(self):
        assert matches_glob("a-wall", "A*")
        assert not matches_glob("b-wall", "A*")

    def test_glob_is_anchored(self):
        assert not matches_glob("xa-wall", "a*")
        assert matches_glob("xa-wall", "*a*")

    def test_without_wildcard_is_substring(self):
        assert matches_glob("a-wall", "wal")

    def test_regex_characters_are_literal(self):
        assert matches_glob("a.b(1)", "a.b(*")
        assert not matches_glob("axb(1)", "a.b(*")

    def test_empty_never_matches(self):
        assert not matches_glob("", "a*")
        assert not matches_glob("abc", "")


class TestParseNumber:
    def test_valid_numbers(self):
        assert parse_number("5") == 5.0
        assert parse_number(" -2.5 ") == -2.5
        assert parse_number("1e3") == 1000.0
        assert parse_number(7) == 7.0

    def test_invalid_numbers(self):
        assert parse_number("abc") is None
        assert parse_number("1,000") is None
        assert parse_number("") is None
        assert parse_number(None) is None
        assert parse_number(True) is None


class TestSplitting:
    def test_split_respects_quotes(self):
        assert split_outside_quotes('layer:"A WALL" name:x', " ") == ['layer:"A WALL"', "name:x"]

    def test_split_drops_empty_pieces(self):
        assert split_outside_quotes("a,,b, ", ",") == ["a", "b"]

    def test_find_unquoted(self):
        assert find_unquoted('"a:b":c', ":") == 5
        assert find_unquoted("abc", ":") == -1


class TestHeaderMatches:
    def test_fragment_in_header(self):
        assert header_matches(("path",), False, "document path", "DocumentPath")

    def test_all_parts_required(self):
        assert header_matches(("attr", "dated"), False, "attr dated", "attr_DATED")
        assert not header_matches(("attr", "title"), False, "attr dated", "attr_DATED")

    def test_exact(self):
        assert header_matches(("layer",), True, "layer", "Layer")
        assert not header_matches(("lay",), True, "layer", "Layer")

    def test_no_parts_matches_everything(self):
        assert header_matches((), False, "anything", "Anything")
