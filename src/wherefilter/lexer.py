"""Literal lexer, whitespace skipping and IN-clause handling.

Every function takes the remaining query text and returns the text left
after whatever it consumed, so callers thread the remainder through.
"""

import re
from typing import List, Optional, Tuple

from .errors import QuerySyntaxError
from .grammar import (
    BOOLEAN_LITERAL_REGEXP,
    IN_CLAUSE_REGEXP,
    INTEGER_LITERAL_REGEXP,
    LOGICAL_OPERATOR_REGEXP,
    STRING_LITERAL_REGEXP,
    WHITESPACE_REGEXP,
)
from .types import DataType, LiteralToken

# Order matters: "123" must lex as int and "true" as bool before strings.
_LITERAL_PATTERNS = (
    (INTEGER_LITERAL_REGEXP, DataType.INT),
    (BOOLEAN_LITERAL_REGEXP, DataType.BOOL),
    (STRING_LITERAL_REGEXP, DataType.STRING),
)


def parse_literal(text: str) -> Tuple[str, LiteralToken]:
    """Read an integer, boolean or quoted string literal at the cursor.

    Returns:
        Tuple of (remainder, literal)

    Raises:
        QuerySyntaxError: If no literal form matches

    Examples:
        >>> parse_literal("42 AND x = 1")
        (" AND x = 1", LiteralToken(text="42", data_type=DataType.INT))
        >>> parse_literal("'web'")
        ("", LiteralToken(text="'web'", data_type=DataType.STRING))
    """
    for pattern, data_type in _LITERAL_PATTERNS:
        m = pattern.match(text)
        if m:
            return text[m.end():], LiteralToken(m.group(0), data_type)
    raise QuerySyntaxError(f"no operand found at `{text}`", text)


def skip_whitespace(text: str, limit: Optional[int] = None) -> str:
    """Skip leading blanks and tabs.

    ``limit`` of None skips any amount, 0 skips nothing, and a positive
    value skips at most ``limit + 1`` characters.
    """
    if limit == 0:
        return text
    if limit is None:
        pattern = WHITESPACE_REGEXP
    else:
        pattern = re.compile(rf"^[ \t][ \t]{{0,{limit}}}")
    m = pattern.match(text)
    if m:
        return text[m.end():]
    return text


def get_logical_operator(text: str) -> Tuple[str, str]:
    """Consume a leading ``AND`` if present; returns (remainder, operator)."""
    m = LOGICAL_OPERATOR_REGEXP.match(text)
    if m:
        return text[m.end():], m.group(0)
    return text, ""


def parse_in_clause(text: str) -> Tuple[str, str]:
    """Read a parenthesized value list such as ``('a', 'b')``.

    The clause is returned verbatim; values are split later with
    ``parse_in_clause_values``.
    """
    m = IN_CLAUSE_REGEXP.match(text)
    if m is None:
        raise QuerySyntaxError(f"invalid IN clause at `{text}`", text)
    return text[m.end():], m.group(0)


def parse_in_clause_values(clause: str) -> List[str]:
    """Split an IN clause into its values.

    Parentheses are trimmed, elements split on commas, whitespace and single
    quotes stripped, and empty elements dropped.

    Examples:
        >>> parse_in_clause_values("('default', 'kube-system')")
        ["default", "kube-system"]
        >>> parse_in_clause_values("( 'a', , 'b' )")
        ["a", "b"]
    """
    values = []
    for part in clause.strip("()").split(","):
        value = part.strip().strip("'")
        if value:
            values.append(value)
    return values


__all__ = [
    "get_logical_operator",
    "parse_in_clause",
    "parse_in_clause_values",
    "parse_literal",
    "skip_whitespace",
]
