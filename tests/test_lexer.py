"""Unit tests for the literal lexer and IN-clause helpers."""

import pytest

from wherefilter.errors import QuerySyntaxError
from wherefilter.lexer import (
    get_logical_operator,
    parse_in_clause,
    parse_in_clause_values,
    parse_literal,
    skip_whitespace,
)
from wherefilter.types import DataType


class TestParseLiteral:
    """Test integer, boolean and string literal recognition."""

    def test_integer(self):
        rest, token = parse_literal("42 AND x = 1")
        assert token.text == "42"
        assert token.data_type == DataType.INT
        assert rest == " AND x = 1"

    def test_integer_capped_at_ten_digits(self):
        """Digits past the tenth are left in the remainder."""
        rest, token = parse_literal("123456789012")
        assert token.text == "1234567890"
        assert rest == "12"

    def test_boolean(self):
        rest, token = parse_literal("true")
        assert token.text == "true"
        assert token.data_type == DataType.BOOL
        assert rest == ""

    def test_boolean_is_case_sensitive(self):
        with pytest.raises(QuerySyntaxError, match="no operand found"):
            parse_literal("TRUE")

    def test_string_keeps_quotes(self):
        rest, token = parse_literal("'nginx:1.25' AND")
        assert token.text == "'nginx:1.25'"
        assert token.data_type == DataType.STRING
        assert rest == " AND"

    def test_empty_string(self):
        _, token = parse_literal("''")
        assert token.text == "''"

    def test_quoted_digits_are_a_string(self):
        _, token = parse_literal("'123'")
        assert token.data_type == DataType.STRING

    def test_embedded_quote_is_rejected(self):
        """There are no escapes; a backslash-quote cannot appear in a literal."""
        with pytest.raises(QuerySyntaxError):
            parse_literal("'it\\'s'")

    def test_double_quotes_are_rejected(self):
        with pytest.raises(QuerySyntaxError):
            parse_literal('"web"')

    def test_unterminated_string(self):
        with pytest.raises(QuerySyntaxError) as exc_info:
            parse_literal("'web")
        assert exc_info.value.remainder == "'web"

    def test_overlong_string(self):
        with pytest.raises(QuerySyntaxError):
            parse_literal("'" + "a" * 256 + "'")

    def test_empty_input_names_empty_remainder(self):
        with pytest.raises(QuerySyntaxError, match="no operand found at ``"):
            parse_literal("")


class TestWhitespace:
    def test_skips_blanks_and_tabs(self):
        assert skip_whitespace(" \t  x") == "x"

    def test_no_whitespace(self):
        assert skip_whitespace("x ") == "x "

    def test_newline_is_not_whitespace(self):
        assert skip_whitespace("\nx") == "\nx"

    def test_zero_limit_skips_nothing(self):
        assert skip_whitespace("  x", limit=0) == "  x"

    def test_positive_limit(self):
        assert skip_whitespace("    x", limit=1) == "  x"


class TestLogicalOperator:
    def test_and(self):
        assert get_logical_operator("AND b = 1") == (" b = 1", "AND")

    def test_lowercase_and_is_not_an_operator(self):
        assert get_logical_operator("and b = 1") == ("and b = 1", "")

    def test_or_is_not_an_operator(self):
        assert get_logical_operator("OR b = 1") == ("OR b = 1", "")


class TestInClause:
    def test_clause_is_kept_verbatim(self):
        rest, clause = parse_in_clause("('a', 'b') AND x = 1")
        assert clause == "('a', 'b')"
        assert rest == " AND x = 1"

    def test_missing_parenthesis(self):
        with pytest.raises(QuerySyntaxError, match="invalid IN clause"):
            parse_in_clause("'a', 'b'")

    def test_empty_clause(self):
        with pytest.raises(QuerySyntaxError):
            parse_in_clause("()")

    def test_values(self):
        assert parse_in_clause_values("('default', 'kube-system')") == [
            "default",
            "kube-system",
        ]

    def test_values_drop_empty_elements(self):
        assert parse_in_clause_values("( 'a', , '' ,'b' )") == ["a", "b"]

    def test_unquoted_values(self):
        assert parse_in_clause_values("(1, 2, true)") == ["1", "2", "true"]
