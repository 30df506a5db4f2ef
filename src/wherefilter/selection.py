"""Selecting resources with a where-filter.

A resource is selected when every expression is satisfied by at least one of
the values the resolver finds for it. Values are resolved by a caller-supplied
resolver, so this module never walks documents itself.
"""

import logging
from typing import (
    Any,
    Callable,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from .evaluator import CustomComparator, evaluate, evaluate_missing
from .parser import parse_standard_where_filter
from .types import DataType, RelationalExpression, ResolvedValue

logger = logging.getLogger(__name__)

Resolver = Callable[[Any, RelationalExpression], Iterable[ResolvedValue]]


def declare_types(
    expressions: Sequence[RelationalExpression],
    declared_types: Optional[Mapping[str, DataType]],
) -> List[RelationalExpression]:
    """Re-type expressions whose path has a declared data type.

    IN clauses keep their string type.
    """
    if not declared_types:
        return list(expressions)
    typed = []
    for expr in expressions:
        data_type = declared_types.get(expr.path)
        if data_type is not None and not expr.is_in_clause:
            expr = expr.with_data_type(data_type)
        typed.append(expr)
    return typed


def infer_length_type(expr: RelationalExpression, value: Any) -> RelationalExpression:
    """Type an undeclared LEN() expression from the collection it measures."""
    if not expr.is_length_expression or expr.data_type.is_storage:
        return expr
    if isinstance(value, dict):
        return expr.with_data_type(DataType.STRING_MAP)
    if isinstance(value, (list, tuple)):
        return expr.with_data_type(DataType.UUID_ARRAY)
    return expr


def matches_expression(
    expr: RelationalExpression,
    resource: Any,
    resolver: Resolver,
    comparators: Sequence[CustomComparator] = (),
) -> bool:
    """True if any value resolved for ``expr`` on ``resource`` satisfies it."""
    for resolved in resolver(resource, expr):
        if not resolved.found:
            matched = evaluate_missing(expr)
        else:
            typed = infer_length_type(expr, resolved.value)
            matched = evaluate(typed, resolved.value, resolved.right, comparators)
        if matched:
            return True
    return False


def select_resources(
    query: Union[str, Sequence[RelationalExpression]],
    resources: Iterable[Any],
    resolver: Resolver,
    comparators: Sequence[CustomComparator] = (),
    declared_types: Optional[Mapping[str, DataType]] = None,
) -> List[Any]:
    """Return the resources selected by ``query``, in input order.

    Args:
        query: Standard-mode where-filter, or already parsed expressions
        resources: Resources to filter
        resolver: Callable returning the values of an expression's path
        comparators: Custom string comparators
        declared_types: Data type per path, for uuid/time/map attributes

    Raises:
        WhereFilterError: If the query does not parse or evaluation fails
    """
    if isinstance(query, str):
        expressions = parse_standard_where_filter(query)
    else:
        expressions = list(query)
    expressions = declare_types(expressions, declared_types)
    comparators = tuple(comparators)

    resources = list(resources)
    if not expressions:
        return resources

    selected = []
    for resource in resources:
        if all(matches_expression(e, resource, resolver, comparators) for e in expressions):
            selected.append(resource)

    logger.debug(
        "Selected %d of %d resource(s) with %d expression(s)",
        len(selected),
        len(resources),
        len(expressions),
    )
    return selected


__all__ = [
    "Resolver",
    "declare_types",
    "infer_length_type",
    "matches_expression",
    "select_resources",
]
