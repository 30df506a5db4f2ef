"""Select command - filter a stream of documents with a where-filter."""

import json
from typing import Dict, Iterator, List

import click
import yaml

from ...errors import WhereFilterError
from ...resolver import DocumentResolver
from ...selection import select_resources
from ...types import DataType
from ..context import fail, pass_context


def parse_type_declarations(items: List[str]) -> Dict[str, DataType]:
    """Parse "path=type" pairs into a path → DataType mapping."""

    result: Dict[str, DataType] = {}
    for item in items:
        if "=" not in item:
            raise ValueError(f"Invalid format: {item} (expected path=type)")
        path, type_name = item.split("=", 1)
        try:
            result[path] = DataType(type_name)
        except ValueError:
            raise ValueError(f"Unknown data type: {type_name}") from None
    return result


def read_documents(content: str, fmt: str) -> Iterator[dict]:
    """Yield documents from NDJSON lines or a (multi-document) YAML stream.

    Lists are flattened into their elements; empty documents are skipped.
    """
    if fmt == "ndjson":
        documents = (json.loads(line) for line in content.splitlines() if line.strip())
    else:
        documents = yaml.safe_load_all(content)

    for doc in documents:
        if doc is None:
            continue
        if isinstance(doc, list):
            yield from doc
        else:
            yield doc


@click.command()
@click.argument("query")
@click.argument("source", type=click.File("r"), default="-")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["yaml", "ndjson"]),
    default="yaml",
    help="Input format (YAML also reads JSON documents)",
)
@click.option(
    "-t",
    "--type",
    "types",
    multiple=True,
    help="Declare an attribute type, e.g. -t 'metadata.labels=map[string]string'",
)
@pass_context
def select(ctx, query, source, fmt, types):
    """Print the documents from SOURCE selected by QUERY as NDJSON.

    Examples:
        wherefilter select "kind = 'Deployment' AND spec.replicas > 1" manifests.yaml
        cat pods.ndjson | wherefilter select -f ndjson "metadata.namespace = 'default'"
        wherefilter select -t 'metadata.labels=map[string]string' "metadata.labels ? 'app'" app.yaml
    """
    try:
        declared = parse_type_declarations(list(types))
    except ValueError as e:
        fail(e, "Invalid --type")

    try:
        documents = list(read_documents(source.read(), fmt))
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        fail(e, "Reader error")

    try:
        selected = select_resources(
            ctx.prepare(query),
            documents,
            DocumentResolver(),
            declared_types=declared,
        )
    except WhereFilterError as e:
        fail(e, "Filter error")

    for doc in selected:
        click.echo(json.dumps(doc, default=str))
