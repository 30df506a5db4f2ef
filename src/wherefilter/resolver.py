"""Reference path resolver for plain nested documents.

Resolves validated where-filter paths against dict/list structures as
produced by ``yaml.safe_load`` or ``json.loads``. Parameter names in bound
and wildcard segments are accepted but not recorded. ``#`` embedded
accessors are not supported and resolve to nothing.

Key escapes: ``~1`` stands for ``.`` and ``~2`` for ``#``.
"""

import uuid
from datetime import datetime
from typing import Any, Iterable, List

from .evaluator import coerce_value
from .types import DataType, RelationalExpression, ResolvedValue

_ESCAPES = (("~1", "."), ("~2", "#"))


def unescape_segment(segment: str) -> str:
    for token, char in _ESCAPES:
        segment = segment.replace(token, char)
    return segment


def _children(node: Any) -> List[Any]:
    if isinstance(node, dict):
        return list(node.values())
    if isinstance(node, list):
        return list(node)
    return []


def _field_name(spec: str) -> str:
    # "name:param" → "name"
    return unescape_segment(spec.split(":", 1)[0])


def _step(node: Any, segment: str) -> List[Any]:
    if segment.startswith("*"):
        rest = segment[1:]
        if rest.startswith("?"):
            field = _field_name(rest[1:])
            return [c for c in _children(node) if isinstance(c, dict) and field in c]
        return _children(node)

    if segment.startswith("?"):
        spec, _, wanted = segment[1:].partition("=")
        field = _field_name(spec)
        if not isinstance(node, list):
            return []
        return [
            c for c in node
            if isinstance(c, dict) and field in c and _scalar_text(c[field]) == wanted
        ]

    if segment.startswith("@"):
        segment = segment[1:].split(":", 1)[0]

    if isinstance(node, list):
        if segment.isdigit() and int(segment) < len(node):
            return [node[int(segment)]]
        return []
    if isinstance(node, dict):
        key = unescape_segment(segment)
        if key in node:
            return [node[key]]
    return []


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def resolve_path(document: Any, path: str) -> List[Any]:
    """Return every value at ``path`` in ``document`` (empty if none)."""
    if "#" in path:
        return []
    nodes = [document]
    for segment in path.split("."):
        nodes = [found for node in nodes for found in _step(node, segment)]
        if not nodes:
            break
    return nodes


def _fits(data_type: DataType, value: Any) -> bool:
    if data_type == DataType.STRING:
        return isinstance(value, str)
    if data_type == DataType.INT:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if data_type == DataType.BOOL:
        return isinstance(value, bool)
    if data_type == DataType.UUID:
        return isinstance(value, uuid.UUID)
    if data_type == DataType.TIME:
        return isinstance(value, datetime)
    if data_type == DataType.UUID_ARRAY:
        return isinstance(value, (list, tuple))
    if data_type.is_storage:
        return isinstance(value, dict)
    return True


class DocumentResolver:
    """Resolve expressions against documents.

    Values are converted to the expression's data type first, so identifiers
    and timestamps stored as strings compare as ``uuid.UUID`` and ``datetime``.
    With ``typed=True`` (the default) values that cannot be converted or whose
    type does not fit are skipped rather than handed to the evaluator, so
    ``spec.replicas = 'three'`` simply does not match an integer field.
    With ``typed=False`` they are passed on unchanged.
    """

    def __init__(self, typed: bool = True):
        self.typed = typed

    def _convert(self, expr: RelationalExpression, values: Iterable[Any]) -> List[ResolvedValue]:
        if expr.is_length_expression or expr.is_in_clause:
            return [ResolvedValue(value) for value in values]

        resolved = []
        for value in values:
            try:
                value = coerce_value(expr.data_type, value)
            except (ValueError, TypeError, AttributeError):
                if self.typed:
                    continue
            if not self.typed or _fits(expr.data_type, value):
                resolved.append(ResolvedValue(value))
        return resolved

    def __call__(self, document: Any, expr: RelationalExpression) -> Iterable[ResolvedValue]:
        if not expr.is_split_path:
            return self._convert(expr, resolve_path(document, expr.path))

        resolved = []
        for node in resolve_path(document, expr.visitor_path):
            values = resolve_path(node, expr.sub_path)
            if not values:
                resolved.append(ResolvedValue(found=False))
                continue
            resolved.extend(self._convert(expr, values))
        return resolved


__all__ = [
    "DocumentResolver",
    "resolve_path",
    "unescape_segment",
]
