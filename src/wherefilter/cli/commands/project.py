"""Project command - turn an import query into filters and options."""

import json

import click

from ...errors import WhereFilterError
from ...importing import project as project_query
from ..context import fail, pass_context


@click.command()
@click.argument("query")
@pass_context
def project(ctx, query):
    """Print the import filters and options of QUERY as JSON.

    Examples:
        wherefilter project "metadata.namespace IN ('default', 'prod') AND import.include_system = true"
    """
    try:
        projection = project_query(ctx.prepare(query))
    except WhereFilterError as e:
        fail(e)

    click.echo(json.dumps(projection.model_dump(by_alias=True), indent=2))
