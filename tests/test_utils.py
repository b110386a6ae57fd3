"""Tests for shared utility functions."""

from booking_orchestrator.utils import extract_first_integer, normalize_phone


class TestNormalizePhone:
    def test_strips_spaces(self):
        assert normalize_phone("415 555 0198") == "4155550198"

    def test_strips_dashes(self):
        assert normalize_phone("415-555-0198") == "4155550198"

    def test_strips_parentheses(self):
        assert normalize_phone("(415) 555-0198") == "4155550198"

    def test_preserves_leading_plus(self):
        assert normalize_phone("+1 415 555 0198") == "+14155550198"

    def test_clean_number_unchanged(self):
        assert normalize_phone("4155550198") == "4155550198"

    def test_strips_whitespace(self):
        assert normalize_phone("  4155550198  ") == "4155550198"


class TestExtractFirstInteger:
    def test_bare_number(self):
        assert extract_first_integer("3") == 3

    def test_first_of_many(self):
        assert extract_first_integer("2 or 4") == 2

    def test_negative(self):
        assert extract_first_integer("-2") == -2

    def test_none(self):
        assert extract_first_integer("number two") is None
