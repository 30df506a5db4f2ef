"""Eval command - evaluate a where-filter against a single value."""

import json

import click

from ...errors import WhereFilterError
from ...evaluator import coerce_value, evaluate
from ...parser import parse_standard_where_filter
from ...selection import infer_length_type
from ...types import DataType
from ..context import fail, pass_context

_TYPE_NAMES = [t.value for t in DataType if t is not DataType.NONE]


@click.command(name="eval")
@click.argument("query")
@click.option("--value", "value_json", required=True, help="Left operand as JSON")
@click.option("--right", "right_json", default=None, help="Right operand as JSON (default: the literal)")
@click.option(
    "--type",
    "type_name",
    type=click.Choice(_TYPE_NAMES),
    default=None,
    help="Declared data type of the attribute (default: inferred from the literal)",
)
@pass_context
def eval_command(ctx, query, value_json, right_json, type_name):
    """Evaluate every expression of QUERY against the same value.

    Prints true only if all expressions match.

    Examples:
        wherefilter eval "name LIKE 'ab%'" --value '"abcdef"'
        wherefilter eval "LEN(labels) >= 2" --value '{"a": "1", "b": "2"}' --type 'map[string]string'
    """
    try:
        expressions = parse_standard_where_filter(ctx.prepare(query))
        left = json.loads(value_json)
        right = json.loads(right_json) if right_json is not None else None

        matched = True
        for expr in expressions:
            if type_name is not None and not expr.is_in_clause:
                expr = expr.with_data_type(DataType(type_name))
            else:
                expr = infer_length_type(expr, left)
            typed_left = coerce_value(expr.data_type, left)
            typed_right = right if expr.data_type.is_storage else coerce_value(expr.data_type, right)
            if not evaluate(expr, typed_left, typed_right):
                matched = False
                break
    except json.JSONDecodeError as e:
        fail(e, "Invalid JSON operand")
    except (ValueError, TypeError, AttributeError) as e:
        fail(e, "Invalid operand")
    except WhereFilterError as e:
        fail(e)

    click.echo("true" if matched else "false")
