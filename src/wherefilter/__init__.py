"""wherefilter: a where-filter query language for configuration resources.

Queries are chains of ``path operator literal`` clauses joined by ``AND``:

    metadata.namespace = 'default' AND kind != 'Secret'
    kind NOT IN ('Secret', 'ConfigMap') AND import.include_system = true
"""

from .errors import (
    ImportProjectionError,
    InternalEvaluationError,
    InvalidLiteralError,
    QueryPreprocessError,
    QuerySyntaxError,
    UnsupportedDataTypeError,
    UnsupportedOperatorError,
    WhereFilterError,
)
from .evaluator import CustomComparator, evaluate
from .grammar import IMPORT_OPERATORS, STANDARD_OPERATORS, OperatorSet
from .importing import project, project_to_import_filters
from .lexer import parse_in_clause_values
from .models import ImportFilter, ImportOptions, ImportProjection
from .parser import (
    parse_binary_expression,
    parse_import_where_filter,
    parse_standard_where_filter,
    parse_where_filter,
    preprocess_query_string,
    validate_import_operator,
)
from .selection import select_resources
from .types import DataType, LiteralToken, RelationalExpression, ResolvedValue

__all__ = [
    "__version__",
    "CustomComparator",
    "DataType",
    "IMPORT_OPERATORS",
    "ImportFilter",
    "ImportOptions",
    "ImportProjection",
    "ImportProjectionError",
    "InternalEvaluationError",
    "InvalidLiteralError",
    "LiteralToken",
    "OperatorSet",
    "QueryPreprocessError",
    "QuerySyntaxError",
    "RelationalExpression",
    "ResolvedValue",
    "STANDARD_OPERATORS",
    "UnsupportedDataTypeError",
    "UnsupportedOperatorError",
    "WhereFilterError",
    "evaluate",
    "parse_binary_expression",
    "parse_import_where_filter",
    "parse_in_clause_values",
    "parse_standard_where_filter",
    "parse_where_filter",
    "preprocess_query_string",
    "project",
    "project_to_import_filters",
    "select_resources",
    "validate_import_operator",
]

__version__ = "0.1.0"
