"""Projection of import where-filters into filters and options.

Paths starting with ``import.`` set options; every other expression becomes
an ``ImportFilter``:

    metadata.namespace IN ('default', 'prod') AND import.include_system = true

    → filters: [ImportFilter(type="metadata.namespace", operator="include",
                             values=["default", "prod"])]
      options: {"include_system": True}
"""

from typing import Any, List, Tuple

from .errors import ImportProjectionError, UnsupportedOperatorError, WhereFilterError
from .grammar import IMPORT_OPTION_PREFIX
from .lexer import parse_in_clause_values
from .models import ImportFilter, ImportOptions, ImportProjection
from .parser import parse_import_where_filter
from .types import DataType, RelationalExpression

_IMPORT_OPERATOR_NAMES = {
    "=": "include",
    "!=": "exclude",
    "IN": "include",
    "NOT IN": "exclude",
}


def map_import_operator(operator: str) -> str:
    """Map a where-filter operator to an import filter operator."""
    return _IMPORT_OPERATOR_NAMES.get(operator, operator)


def expression_values(expr: RelationalExpression) -> List[str]:
    """Values of an expression: the IN list, or the single unquoted literal."""
    if expr.is_in_clause:
        return parse_in_clause_values(expr.literal)
    return [expr.unquoted_literal]


def literal_to_option_value(literal: str, data_type: DataType) -> Any:
    """Convert an option literal; integers stay strings for the consumer to parse."""
    if data_type == DataType.BOOL:
        return literal == "true"
    if data_type == DataType.STRING and len(literal) >= 2 and literal[0] == literal[-1] == "'":
        return literal[1:-1]
    return literal


def to_import_filter(expr: RelationalExpression) -> ImportFilter:
    return ImportFilter(
        type=expr.path,
        operator=map_import_operator(expr.operator),
        values=expression_values(expr),
    )


def apply_import_option(expr: RelationalExpression, options: ImportOptions) -> None:
    """Store an ``import.*`` expression into ``options``; later keys overwrite."""
    if expr.operator != "=":
        raise UnsupportedOperatorError(expr.operator, ("=",), context="import options")
    name = expr.path[len(IMPORT_OPTION_PREFIX):]
    options[name] = literal_to_option_value(expr.literal, expr.data_type)


def project_expressions(
    expressions: List[RelationalExpression],
) -> Tuple[List[ImportFilter], ImportOptions]:
    """Split parsed expressions into import filters and options.

    The input list is not modified. Filters keep query order and are never
    merged, even when two target the same path.
    """
    filters: List[ImportFilter] = []
    options: ImportOptions = {}

    for expr in expressions:
        if expr.path.startswith(IMPORT_OPTION_PREFIX):
            try:
                apply_import_option(expr, options)
            except WhereFilterError as e:
                raise ImportProjectionError(
                    f"failed to handle import option '{expr.path}': {e}"
                ) from e
        else:
            filters.append(to_import_filter(expr))

    return filters, options


def project_to_import_filters(query: str) -> Tuple[List[ImportFilter], ImportOptions]:
    """Parse an import where-filter and project it.

    Raises:
        ImportProjectionError: If the query does not parse or an option is invalid
    """
    try:
        expressions = parse_import_where_filter(query)
    except WhereFilterError as e:
        raise ImportProjectionError(f"failed to parse where filter: {e}") from e
    return project_expressions(expressions)


def project(query: str) -> ImportProjection:
    """Like ``project_to_import_filters`` but returns a single model."""
    filters, options = project_to_import_filters(query)
    return ImportProjection(filters=filters, options=options)


__all__ = [
    "apply_import_option",
    "expression_values",
    "literal_to_option_value",
    "map_import_operator",
    "project",
    "project_expressions",
    "project_to_import_filters",
    "to_import_filter",
]
