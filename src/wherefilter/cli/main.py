"""wherefilter CLI main entry point with global options."""

import click
from pydantic import ValidationError

from ..settings import load_settings
from .context import QueryContext, configure_logging, fail


@click.group()
@click.option(
    "--max-length",
    type=int,
    default=None,
    help="Longest accepted query after decoding (overrides $WHEREFILTER_MAX_QUERY_LENGTH, 0 disables)",
)
@click.option(
    "--decode",
    is_flag=True,
    default=False,
    help="Percent-decode queries first, e.g. when copied from a URL (overrides $WHEREFILTER_PERCENT_DECODE)",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, max_length, decode, verbose):
    """Parse, evaluate and project where-filter queries."""
    ctx.ensure_object(QueryContext)

    overrides = {
        "max_query_length": max_length,
        "percent_decode": True if decode else None,
        "log_level": "DEBUG" if verbose else None,
    }
    try:
        ctx.obj.settings = load_settings(overrides)
    except ValidationError as e:
        fail(e, "Invalid settings")
    configure_logging(ctx.obj.settings.log_level)


# Register commands at module level so tests can import cli with commands attached
from .commands.eval import eval_command
from .commands.parse import parse
from .commands.project import project
from .commands.select import select

cli.add_command(parse)
cli.add_command(project)
cli.add_command(eval_command)
cli.add_command(select)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
