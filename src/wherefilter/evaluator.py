"""Typed evaluation of parsed relational expressions.

The evaluator never sees documents. Callers resolve the expression's path
themselves and pass the value found there as ``left``. ``right`` is only
given when comparing against another resolved attribute; otherwise the
expression's literal is the right operand.

Dispatch is on ``RelationalExpression.data_type``:

    string                  comparisons, LIKE family, RE2 regular expressions
    int                     comparisons
    bool                    = and !=
    uuid                    = and !=
    time                    comparisons on timestamps
    []uuid and map types    ? (containment), or comparisons on LEN()

``IN`` and ``NOT IN`` are handled before dispatch by stringifying ``left``.
"""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Protocol, Sequence

import re2

from .errors import (
    InternalEvaluationError,
    InvalidLiteralError,
    UnsupportedDataTypeError,
)
from .grammar import (
    COMPARISON_OPERATORS,
    CONTAINS_OPERATOR,
    EQUALITY_OPERATORS,
    IN_OPERATOR,
    NOT_IN_OPERATOR,
)
from .lexer import parse_in_clause_values
from .types import DataType, RelationalExpression

logger = logging.getLogger(__name__)


class CustomComparator(Protocol):
    """Override for string evaluation on specific paths.

    Comparators are consulted in order and the first whose ``matches_path``
    returns True evaluates the expression. They compare ``value`` against
    the expression's literal.
    """

    def matches_path(self, path: str) -> bool:
        ...

    def evaluate(self, expr: RelationalExpression, value: Any) -> bool:
        ...


_ORDERING: Dict[str, Callable[[Any, Any], bool]] = {
    "=": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}

# operator → (case-insensitive, negated)
_LIKE_OPERATORS = {
    "LIKE": (False, False),
    "~~": (False, False),
    "NOT LIKE": (False, True),
    "!~~": (False, True),
    "ILIKE": (True, False),
    "~~*": (True, False),
    "NOT ILIKE": (True, True),
    "!~~*": (True, True),
}
_REGEX_OPERATORS = {
    "~": (False, False),
    "~*": (True, False),
    "!~": (False, True),
    "!~*": (True, True),
}


def _unsupported(expr: RelationalExpression) -> UnsupportedDataTypeError:
    return UnsupportedDataTypeError(
        f"unsupported data type `{expr.data_type.value}` "
        f"with operator `{expr.operator}` at path `{expr.path}`"
    )


def _compare(expr: RelationalExpression, left: Any, right: Any) -> bool:
    compare = _ORDERING.get(expr.operator)
    if compare is None:
        raise _unsupported(expr)
    return compare(left, right)


# Characters RE2 treats as syntax; escaped with a backslash.
_RE2_METACHARACTERS = frozenset("\\.+*?()|[]{}^$")


def _re2_options(case_insensitive: bool = False, dot_nl: bool = False) -> "re2.Options":
    options = re2.Options()
    options.case_sensitive = not case_insensitive
    options.dot_nl = dot_nl
    options.log_errors = False
    return options


def compile_regexp(pattern: str, case_insensitive: bool = False):
    """Compile a user-supplied pattern with RE2.

    RE2 matches in time linear in the length of the value.

    Raises:
        InvalidLiteralError: If RE2 rejects the pattern
    """
    try:
        return re2.compile(pattern, _re2_options(case_insensitive))
    except re2.error as e:
        raise InvalidLiteralError(f"invalid regular expression `{pattern}`: {e}") from e


def like_to_regexp(pattern: str, case_insensitive: bool = False):
    """Translate a SQL LIKE pattern into an anchored RE2 expression.

    ``%`` matches any run of characters and ``_`` exactly one character;
    everything else matches literally.

    Examples:
        >>> like_to_regexp("ab%").match("abcdef") is not None
        True
    """
    parts = []
    for ch in pattern:
        if ch == "%":
            parts.append(".*")
        elif ch == "_":
            parts.append(".")
        elif ch in _RE2_METACHARACTERS:
            parts.append("\\" + ch)
        else:
            parts.append(ch)
    return re2.compile("^" + "".join(parts) + "$", _re2_options(case_insensitive, dot_nl=True))


def _truncate(expr: RelationalExpression, value: float, what: str) -> int:
    try:
        return int(value)
    except (ValueError, OverflowError) as e:
        raise InternalEvaluationError(
            f"non-finite {what} {value} at path `{expr.path}`"
        ) from e


def _stringify_for_in(expr: RelationalExpression, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(_truncate(expr, value, "value"))
    if isinstance(value, str):
        return value
    raise InternalEvaluationError(
        f"unsupported value type {type(value).__name__} for {expr.operator} at path `{expr.path}`"
    )


def _evaluate_in(expr: RelationalExpression, left: Any, right: Any) -> bool:
    if right is not None:
        raise InternalEvaluationError(
            f"{expr.operator} at path `{expr.path}` takes no right operand"
        )
    found = _stringify_for_in(expr, left) in parse_in_clause_values(expr.literal)
    return not found if expr.operator == NOT_IN_OPERATOR else found


def _evaluate_string(
    expr: RelationalExpression,
    left: Any,
    right: Any,
    comparators: Sequence[CustomComparator],
) -> bool:
    for comparator in comparators:
        if comparator.matches_path(expr.path):
            logger.debug("Path %s handled by %s", expr.path, type(comparator).__name__)
            return comparator.evaluate(expr, left)

    if not isinstance(left, str):
        raise InternalEvaluationError(
            f"expected string value at path `{expr.path}`, got {type(left).__name__}"
        )
    if right is None:
        right = expr.unquoted_literal
    elif not isinstance(right, str):
        raise InternalEvaluationError(
            f"expected string right operand for path `{expr.path}`, got {type(right).__name__}"
        )

    if expr.operator in _LIKE_OPERATORS:
        case_insensitive, negated = _LIKE_OPERATORS[expr.operator]
        matched = like_to_regexp(right, case_insensitive).match(left) is not None
        return not matched if negated else matched

    if expr.operator in _REGEX_OPERATORS:
        case_insensitive, negated = _REGEX_OPERATORS[expr.operator]
        matched = compile_regexp(right, case_insensitive).search(left) is not None
        return not matched if negated else matched

    return _compare(expr, left, right)


def _as_int(expr: RelationalExpression, value: Any, what: str) -> int:
    # bool is an int subclass; never accept it as a number
    if isinstance(value, bool):
        raise InternalEvaluationError(
            f"expected integer {what} at path `{expr.path}`, got bool"
        )
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return _truncate(expr, value, what)
    raise InternalEvaluationError(
        f"expected integer {what} at path `{expr.path}`, got {type(value).__name__}"
    )


def _int_right_operand(expr: RelationalExpression, right: Any) -> int:
    if right is not None:
        return _as_int(expr, right, "right operand")
    try:
        return int(expr.literal)
    except ValueError as e:
        raise InvalidLiteralError(f"invalid integer literal `{expr.literal}`") from e


def _evaluate_int(expr: RelationalExpression, left: Any, right: Any) -> bool:
    return _compare(expr, _as_int(expr, left, "value"), _int_right_operand(expr, right))


def _evaluate_bool(expr: RelationalExpression, left: Any, right: Any) -> bool:
    if expr.operator not in EQUALITY_OPERATORS:
        raise _unsupported(expr)
    if not isinstance(left, bool):
        raise InternalEvaluationError(
            f"expected bool value at path `{expr.path}`, got {type(left).__name__}"
        )
    if right is None:
        right = expr.literal == "true"
    elif not isinstance(right, bool):
        raise InternalEvaluationError(
            f"expected bool right operand for path `{expr.path}`, got {type(right).__name__}"
        )
    return _compare(expr, left, right)


def parse_uuid_literal(literal: str) -> uuid.UUID:
    """Parse a (possibly quoted) identifier literal."""
    try:
        return uuid.UUID(literal.strip("'"))
    except ValueError as e:
        raise InvalidLiteralError(f"invalid identifier literal `{literal}`") from e


def _as_uuid(expr: RelationalExpression, value: Any, what: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    raise InternalEvaluationError(
        f"expected uuid {what} at path `{expr.path}`, got {type(value).__name__}"
    )


def _evaluate_uuid(expr: RelationalExpression, left: Any, right: Any) -> bool:
    if expr.operator not in EQUALITY_OPERATORS:
        raise _unsupported(expr)
    left = _as_uuid(expr, left, "value")
    if right is None:
        right = parse_uuid_literal(expr.literal)
    else:
        right = _as_uuid(expr, right, "right operand")
    return _compare(expr, left, right)


# Seconds fraction of an RFC 3339 timestamp, any number of digits.
_FRACTION_REGEXP = re.compile(r"(?<=:\d\d)\.(\d+)")


def parse_timestamp(text: str) -> datetime:
    """Parse an unquoted RFC 3339 / ISO 8601 timestamp.

    Fractions of any precision are accepted; digits beyond microseconds are
    dropped. Timestamps without an offset are taken as UTC so that all parsed
    values are comparable.

    Raises:
        ValueError: If ``text`` is not a timestamp
    """
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_REGEXP.sub(
        lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1
    )
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_time_literal(literal: str) -> datetime:
    """Parse a (possibly quoted) timestamp literal."""
    try:
        return parse_timestamp(literal.strip("'"))
    except ValueError as e:
        raise InvalidLiteralError(f"invalid time literal `{literal}`") from e


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        return uuid.UUID(value)
    raise TypeError(f"expected identifier string, got {type(value).__name__}")


def coerce_value(data_type: DataType, value: Any) -> Any:
    """Convert a value decoded from JSON or YAML to the type evaluation expects.

    Identifiers arrive as strings and timestamps as strings or datetimes;
    everything else is already in evaluation form and is returned as is.

    Examples:
        >>> coerce_value(DataType.TIME, "2024-01-01T00:00:00Z")
        datetime.datetime(2024, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)

    Raises:
        ValueError: If a string is not a valid identifier or timestamp
        TypeError: If the value has the wrong shape for ``data_type``
    """
    if value is None:
        return None
    if data_type == DataType.UUID:
        return _to_uuid(value)
    if data_type == DataType.TIME:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            return parse_timestamp(value)
        raise TypeError(f"expected timestamp, got {type(value).__name__}")
    if data_type == DataType.UUID_ARRAY:
        if not isinstance(value, (list, tuple)):
            raise TypeError(f"expected list of identifiers, got {type(value).__name__}")
        return [_to_uuid(v) for v in value]
    if data_type == DataType.UUID_STRING_MAP:
        if not isinstance(value, dict):
            raise TypeError(f"expected map keyed by identifiers, got {type(value).__name__}")
        return {_to_uuid(k): v for k, v in value.items()}
    return value


def _as_time(expr: RelationalExpression, value: Any, what: str) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    raise InternalEvaluationError(
        f"expected time {what} at path `{expr.path}`, got {type(value).__name__}"
    )


def _evaluate_time(expr: RelationalExpression, left: Any, right: Any) -> bool:
    left = _as_time(expr, left, "value")
    if right is None:
        right = parse_time_literal(expr.literal)
    else:
        right = _as_time(expr, right, "right operand")
    # datetime equality compares instants, not representations
    return _compare(expr, left, right)


_STORAGE_SHAPES = {
    DataType.UUID_ARRAY: (list, tuple),
    DataType.STRING_MAP: (dict,),
    DataType.STRING_BOOL_MAP: (dict,),
    DataType.UUID_STRING_MAP: (dict,),
}


def _contains_key(expr: RelationalExpression, left: Any, right: Any) -> bool:
    if expr.data_type in (DataType.UUID_ARRAY, DataType.UUID_STRING_MAP):
        if right is None:
            key = parse_uuid_literal(expr.literal)
        elif isinstance(right, str):
            key = parse_uuid_literal(right)
        else:
            key = _as_uuid(expr, right, "right operand")
        return key in left

    if right is None:
        key = expr.unquoted_literal
    elif isinstance(right, str):
        key = right
    else:
        raise InternalEvaluationError(
            f"expected string key for path `{expr.path}`, got {type(right).__name__}"
        )
    return key in left


def _evaluate_storage(expr: RelationalExpression, left: Any, right: Any) -> bool:
    shape = _STORAGE_SHAPES[expr.data_type]
    if not isinstance(left, shape):
        raise InternalEvaluationError(
            f"expected {expr.data_type.value} value at path `{expr.path}`, "
            f"got {type(left).__name__}"
        )

    if expr.is_length_expression:
        if expr.operator not in COMPARISON_OPERATORS:
            raise _unsupported(expr)
        return _compare(expr, len(left), _int_right_operand(expr, right))

    if expr.operator != CONTAINS_OPERATOR:
        raise _unsupported(expr)
    return _contains_key(expr, left, right)


_EVALUATORS: Dict[DataType, Callable[[RelationalExpression, Any, Any], bool]] = {
    DataType.INT: _evaluate_int,
    DataType.BOOL: _evaluate_bool,
    DataType.UUID: _evaluate_uuid,
    DataType.TIME: _evaluate_time,
    DataType.UUID_ARRAY: _evaluate_storage,
    DataType.STRING_MAP: _evaluate_storage,
    DataType.STRING_BOOL_MAP: _evaluate_storage,
    DataType.UUID_STRING_MAP: _evaluate_storage,
}


def evaluate(
    expr: RelationalExpression,
    left: Any,
    right: Optional[Any] = None,
    comparators: Iterable[CustomComparator] = (),
) -> bool:
    """Evaluate ``expr`` with a resolved left operand.

    Args:
        expr: Parsed (and possibly re-typed) expression
        left: Value found at ``expr.path``
        right: Value of a second attribute, or None to use the literal
        comparators: Custom string comparators, first match wins

    Returns:
        Whether the operands satisfy the expression

    Raises:
        InternalEvaluationError: If an operand does not fit the data type
        InvalidLiteralError: If the literal cannot be read as the data type
        UnsupportedDataTypeError: If the type/operator pair is not defined
    """
    if expr.operator in (IN_OPERATOR, NOT_IN_OPERATOR):
        return _evaluate_in(expr, left, right)

    if expr.data_type == DataType.STRING:
        return _evaluate_string(expr, left, right, tuple(comparators))

    evaluator = _EVALUATORS.get(expr.data_type)
    if evaluator is None:
        raise _unsupported(expr)
    return evaluator(expr, left, right)


def evaluate_missing(expr: RelationalExpression) -> bool:
    """Result for a split path whose optional sub path is absent.

    Only ``!=`` holds for a missing property.
    """
    return expr.operator == "!="


__all__ = [
    "CustomComparator",
    "coerce_value",
    "compile_regexp",
    "evaluate",
    "evaluate_missing",
    "like_to_regexp",
    "parse_time_literal",
    "parse_timestamp",
    "parse_uuid_literal",
]
