"""Core types of the where-filter query language."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class DataType(Enum):
    """Declared data type of an attribute or literal.

    The evaluator dispatches on this tag; the parser only ever infers
    ``INT``, ``BOOL`` and ``STRING``. The remaining members are assigned by
    callers that know the declared type of the attribute being filtered.
    """

    NONE = ""
    STRING = "string"
    INT = "int"
    BOOL = "bool"
    ENUM = "enum"
    UUID = "uuid"
    TIME = "time"
    UUID_ARRAY = "[]uuid"
    STRING_MAP = "map[string]string"
    STRING_BOOL_MAP = "map[string]bool"
    UUID_STRING_MAP = "map[uuid]string"

    @property
    def is_storage(self) -> bool:
        """True for the collection types that support LEN() and ``?``."""
        return self in STORAGE_TYPES


STORAGE_TYPES = frozenset(
    {
        DataType.UUID_ARRAY,
        DataType.STRING_MAP,
        DataType.STRING_BOOL_MAP,
        DataType.UUID_STRING_MAP,
    }
)


@dataclass(frozen=True)
class LiteralToken:
    """A literal recognized by the lexer.

    Examples:
        "42"      → LiteralToken(text="42", data_type=DataType.INT)
        "true"    → LiteralToken(text="true", data_type=DataType.BOOL)
        "'nginx'" → LiteralToken(text="'nginx'", data_type=DataType.STRING)
    """

    text: str
    """Raw matched text. String literals keep their surrounding quotes."""

    data_type: DataType


@dataclass(frozen=True)
class RelationalExpression:
    """One ``path operator literal`` clause of a where-filter.

    For ``IN``/``NOT IN`` the literal is the whole parenthesized clause, e.g.
    ``('a', 'b')``, and ``data_type`` is always ``STRING``. The values are
    split out on demand with ``parse_in_clause_values``.
    """

    path: str
    """Attribute path as written, including any ``.|`` split marker."""

    operator: str
    literal: str
    data_type: DataType

    is_length_expression: bool = False
    """True when the path was written as ``LEN(path)``."""

    visitor_path: str = ""
    """Part of a split path before ``.|``; must exist."""

    sub_path: str = ""
    """Part of a split path after ``.|``; may be absent."""

    is_split_path: bool = False

    @property
    def is_in_clause(self) -> bool:
        return self.operator in ("IN", "NOT IN")

    @property
    def unquoted_literal(self) -> str:
        """Literal with surrounding single quotes removed."""
        return self.literal.strip("'")

    def with_data_type(self, data_type: DataType) -> "RelationalExpression":
        """Return a copy of this expression declared as ``data_type``."""
        return replace(self, data_type=data_type)

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "operator": self.operator,
            "literal": self.literal,
            "data_type": self.data_type.value,
            "is_length_expression": self.is_length_expression,
            "visitor_path": self.visitor_path,
            "sub_path": self.sub_path,
            "is_split_path": self.is_split_path,
        }

    def __str__(self) -> str:
        path = f"LEN({self.path})" if self.is_length_expression else self.path
        return f"{path} {self.operator} {self.literal}"


@dataclass(frozen=True)
class ResolvedValue:
    """One value a resolver found for an expression on a resource.

    ``found`` is False for a split path whose optional sub path is absent.
    ``right`` carries a second attribute's value when comparing attributes.
    """

    value: Any = None
    found: bool = True
    right: Any = None


__all__ = [
    "STORAGE_TYPES",
    "DataType",
    "LiteralToken",
    "RelationalExpression",
    "ResolvedValue",
]
