"""Parse command - show how a where-filter is read."""

import json

import click

from ...errors import WhereFilterError
from ...parser import parse_import_where_filter, parse_standard_where_filter
from ..context import fail, pass_context


@click.command()
@click.argument("query")
@click.option(
    "--import",
    "import_mode",
    is_flag=True,
    default=False,
    help="Parse with the import operator set (=, !=, IN, NOT IN)",
)
@pass_context
def parse(ctx, query, import_mode):
    """Print the expressions of QUERY as JSON.

    Examples:
        wherefilter parse "metadata.namespace = 'default' AND spec.replicas > 1"
        wherefilter parse --import "kind NOT IN ('Secret', 'ConfigMap')"
    """
    try:
        text = ctx.prepare(query)
        if import_mode:
            expressions = parse_import_where_filter(text)
        else:
            expressions = parse_standard_where_filter(text)
    except WhereFilterError as e:
        fail(e)

    click.echo(json.dumps([e.to_dict() for e in expressions], indent=2))
