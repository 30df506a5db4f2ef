"""Shared state for CLI commands."""

import logging
import sys
from typing import Optional

import click

from ..parser import preprocess_query_string
from ..settings import Settings


class QueryContext:
    def __init__(self):
        self.settings = Settings()

    def prepare(self, query: str) -> str:
        """Decode and length-check a query given on the command line."""
        return preprocess_query_string(
            query,
            max_length=self.settings.max_query_length,
            decode=self.settings.percent_decode,
        )


pass_context = click.make_pass_decorator(QueryContext, ensure=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def fail(error: Exception, prefix: Optional[str] = None) -> None:
    """Report ``error`` on stderr and exit with status 1."""
    message = f"{prefix}: {error}" if prefix else str(error)
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


__all__ = ["QueryContext", "configure_logging", "fail", "pass_context"]
