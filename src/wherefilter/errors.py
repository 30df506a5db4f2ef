"""Exceptions raised while parsing, evaluating and projecting where-filters."""

from typing import Sequence

INTERNAL_ERROR_PREFIX = "internal error: "


class WhereFilterError(Exception):
    """Base class for all where-filter errors."""

    pass


class QuerySyntaxError(WhereFilterError):
    """Malformed path, operator, literal or IN clause.

    ``remainder`` holds the unparsed text at the point of failure.
    """

    def __init__(self, message: str, remainder: str = ""):
        super().__init__(message)
        self.remainder = remainder


class QueryPreprocessError(QuerySyntaxError):
    """Query could not be decoded or is longer than allowed."""

    pass


class UnsupportedOperatorError(WhereFilterError):
    """Operator is valid in general but not in the active mode or context."""

    def __init__(self, operator: str, supported: Sequence[str], context: str = "import queries"):
        self.operator = operator
        self.supported = tuple(supported)
        super().__init__(
            f"operator '{operator}' is not supported for {context}. "
            f"Supported operators: [{' '.join(self.supported)}]"
        )


class InvalidLiteralError(WhereFilterError):
    """Literal cannot be converted to the declared data type."""

    pass


class UnsupportedDataTypeError(WhereFilterError):
    """No evaluation is defined for this data type / operator combination."""

    pass


class InternalEvaluationError(WhereFilterError):
    """Operand does not match the expression's declared data type.

    This points at a bug in whatever resolved the operand, not at the query.
    """

    def __init__(self, message: str):
        super().__init__(f"{INTERNAL_ERROR_PREFIX}{message}")


class ImportProjectionError(WhereFilterError):
    """An expression could not be turned into an import filter or option."""

    pass


__all__ = [
    "INTERNAL_ERROR_PREFIX",
    "ImportProjectionError",
    "InternalEvaluationError",
    "InvalidLiteralError",
    "QueryPreprocessError",
    "QuerySyntaxError",
    "UnsupportedDataTypeError",
    "UnsupportedOperatorError",
    "WhereFilterError",
]
