"""Where-filter parsing.

A where-filter is a chain of relational expressions joined by ``AND``:

    metadata.namespace = 'default' AND spec.replicas > 1

Two modes share one parser and differ only in the operator set they pass:

- standard: comparison, LIKE-family, regex and ``?`` operators; no IN
- import:   ``=``, ``!=``, ``IN``, ``NOT IN`` (checked again after parsing)

Parsing is eager and all-or-nothing: the first malformed clause raises and
no partial result is returned.
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import unquote_plus

from .errors import QueryPreprocessError, QuerySyntaxError, UnsupportedOperatorError
from .grammar import (
    AND_OPERATOR,
    EQUALITY_OPERATORS,
    IMPORT_OPERATORS,
    IMPORT_SUPPORTED_OPERATORS,
    IN_OPERATOR,
    LENGTH_CLOSE_REGEXP,
    LENGTH_OPEN_REGEXP,
    NOT_IN_OPERATOR,
    PATH_REGEXP,
    SPLIT_MARKER,
    STANDARD_OPERATORS,
    OperatorSet,
)
from .lexer import get_logical_operator, parse_in_clause, parse_literal, skip_whitespace
from .types import DataType, RelationalExpression

logger = logging.getLogger(__name__)


def _parse_path(text: str) -> Tuple[str, str]:
    m = PATH_REGEXP.match(text)
    if m is None:
        raise QuerySyntaxError(f"invalid path at `{text}`", text)
    return text[m.end():], m.group(0)


def _parse_operand_path(text: str) -> Tuple[str, str, bool]:
    """Read ``path`` or ``LEN(path)``; returns (remainder, path, is_length)."""
    m = LENGTH_OPEN_REGEXP.match(text)
    if m is None:
        text, path = _parse_path(text)
        return text, path, False

    text, path = _parse_path(text[m.end():])
    m = LENGTH_CLOSE_REGEXP.match(text)
    if m is None:
        raise QuerySyntaxError(f"missing `)` after LEN path at `{text}`", text)
    return text[m.end():], path, True


def parse_binary_expression(
    text: str, operators: OperatorSet = STANDARD_OPERATORS
) -> Tuple[str, RelationalExpression]:
    """Parse one ``<path> <operator> <literal-or-list>`` clause.

    Args:
        text: Query text with leading whitespace already skipped
        operators: Operator set of the active parsing mode

    Returns:
        Tuple of (remainder, expression)

    Raises:
        QuerySyntaxError: If the path, operator or operand is malformed
    """
    text, path, is_length = _parse_operand_path(text)

    visitor_path = sub_path = ""
    is_split = SPLIT_MARKER in path
    if is_split:
        visitor_path, sub_path = path.split(SPLIT_MARKER, 1)

    text = skip_whitespace(text)
    operator = operators.match(text)
    if operator is None:
        raise QuerySyntaxError(f"invalid operator at `{text}`", text)
    text = skip_whitespace(text[len(operator):])

    if operator in (IN_OPERATOR, NOT_IN_OPERATOR):
        text, literal = parse_in_clause(text)
        data_type = DataType.STRING
    else:
        text, token = parse_literal(text)
        literal, data_type = token.text, token.data_type
        if data_type == DataType.BOOL and operator not in EQUALITY_OPERATORS:
            raise QuerySyntaxError(f"invalid boolean operator `{operator}`", text)
        if is_length and data_type != DataType.INT:
            raise QuerySyntaxError(
                f"LEN({path}) must be compared with an integer, got `{literal}`", text
            )

    expression = RelationalExpression(
        path=path,
        operator=operator,
        literal=literal,
        data_type=data_type,
        is_length_expression=is_length,
        visitor_path=visitor_path,
        sub_path=sub_path,
        is_split_path=is_split,
    )
    return text, expression


def parse_where_filter(
    query: str, operators: OperatorSet = STANDARD_OPERATORS
) -> List[RelationalExpression]:
    """Parse a full where-filter with the given operator set.

    A missing ``AND`` between clauses is not an error by itself; the next
    clause parse fails if the remainder is not a clause.
    """
    expressions: List[RelationalExpression] = []

    text = skip_whitespace(query)
    while text:
        text, expression = parse_binary_expression(text, operators)
        expressions.append(expression)
        text = skip_whitespace(text)
        text, logical = get_logical_operator(text)
        if logical == AND_OPERATOR:
            text = skip_whitespace(text)

    for expression in expressions:
        if not operators.is_allowed(expression.operator):
            raise UnsupportedOperatorError(expression.operator, operators.allowed or ())

    logger.debug("Parsed %d expression(s) in %s mode", len(expressions), operators.name)
    return expressions


def parse_standard_where_filter(query: str) -> List[RelationalExpression]:
    """Parse a resource-selection query. IN and NOT IN are rejected."""
    return parse_where_filter(query, STANDARD_OPERATORS)


def parse_import_where_filter(query: str) -> List[RelationalExpression]:
    """Parse an import query; only ``=``, ``!=``, ``IN``, ``NOT IN`` are accepted."""
    return parse_where_filter(query, IMPORT_OPERATORS)


def validate_import_operator(operator: str) -> None:
    """Raise UnsupportedOperatorError unless ``operator`` is legal in import mode."""
    if operator not in IMPORT_SUPPORTED_OPERATORS:
        raise UnsupportedOperatorError(operator, IMPORT_SUPPORTED_OPERATORS)


def preprocess_query_string(
    query: str, max_length: Optional[int] = None, decode: bool = True
) -> str:
    """Percent-decode a raw query and enforce a maximum decoded length.

    Args:
        query: Query as received (e.g. from a URL parameter)
        max_length: Longest accepted decoded query; None or 0 disables the check
        decode: Percent-decode first

    Raises:
        QueryPreprocessError: If decoding fails or the query is too long
    """
    decoded = query
    if decode:
        try:
            decoded = unquote_plus(query, errors="strict")
        except UnicodeDecodeError as e:
            raise QueryPreprocessError(f"failed to decode query string: {e}", query) from e

    if max_length and len(decoded) > max_length:
        raise QueryPreprocessError(
            f"query string exceeds maximum length of {max_length}", decoded
        )
    return decoded


__all__ = [
    "parse_binary_expression",
    "parse_import_where_filter",
    "parse_standard_where_filter",
    "parse_where_filter",
    "preprocess_query_string",
    "validate_import_operator",
]
