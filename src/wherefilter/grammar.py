"""Compiled grammar patterns and operator sets.

Paths support escaped separators (``~1``, ``~2``), wildcards, associative
matches and parameter bindings. Kubernetes annotation and label keys contain
slashes, so ``/`` is a legal key character.

Path segments:
    name                key (letters, digits, ``-``, ``_``, ``/``)
    @name:param         key bound to a named parameter
    0                   array index
    *  *?name[:param]  *@:param
                        wildcard, optionally binding the key
    ?name[:param]=value associative match on an array element's field

A path may contain one ``.|`` split marker (the part before it must exist,
the part after it may not) and may end with a ``#name`` embedded accessor.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

AND_OPERATOR = "AND"
IN_OPERATOR = "IN"
NOT_IN_OPERATOR = "NOT IN"
SPLIT_MARKER = ".|"
IMPORT_OPTION_PREFIX = "import."

_PARAMETER_NAME = r"(?:[A-Za-z][A-Za-z0-9_\-]{0,127})"
_MAP_SEGMENT = r"(?:[A-Za-z](?:[A-Za-z0-9/_\-]|(?:~[12])){0,127})"
_BOUND_SEGMENT = r"(?:@" + _MAP_SEGMENT + r":" + _PARAMETER_NAME + r")"
_INDEX_SEGMENT = r"(?:[0-9][0-9]{0,9})"
_WILDCARD_SEGMENT = (
    r"\*(?:(?:\?" + _MAP_SEGMENT + r"(?::" + _PARAMETER_NAME + r")?)"
    r"|(?:@:" + _PARAMETER_NAME + r"))?"
)
_ASSOCIATIVE_SEGMENT = r"\?" + _MAP_SEGMENT + r"(?::" + _PARAMETER_NAME + r")?=[^.][^.]*"
_SEGMENT = (
    r"(?:" + _MAP_SEGMENT + r"|" + _BOUND_SEGMENT + r"|" + _INDEX_SEGMENT
    + r"|" + _WILDCARD_SEGMENT + r"|" + _ASSOCIATIVE_SEGMENT + r")"
)
# Segments after the split marker cannot use wildcards or associative matches
_PLAIN_SEGMENT = r"(?:" + _MAP_SEGMENT + r"|" + _BOUND_SEGMENT + r"|" + _INDEX_SEGMENT + r")"

PATH_PATTERN = (
    r"^" + _SEGMENT + r"(?:\." + _SEGMENT + r")*"
    r"(?:\.\|" + _PLAIN_SEGMENT + r"(?:\." + _PLAIN_SEGMENT + r")*)?"
    r"(?:#" + _MAP_SEGMENT + r")?"
)

PATH_REGEXP = re.compile(PATH_PATTERN)
MAP_SEGMENT_REGEXP = re.compile(_MAP_SEGMENT)
WHITESPACE_REGEXP = re.compile(r"^[ \t][ \t]*")
LOGICAL_OPERATOR_REGEXP = re.compile(r"^AND")
LENGTH_OPEN_REGEXP = re.compile(r"^LEN\(")
LENGTH_CLOSE_REGEXP = re.compile(r"^\)")

# Tried in this order by the lexer. Integers are capped at ten digits.
INTEGER_LITERAL_REGEXP = re.compile(r"^[0-9][0-9]{0,9}")
BOOLEAN_LITERAL_REGEXP = re.compile(r"^(true|false)")
# No escapes: a quote or backslash inside a string literal is a parse error.
STRING_LITERAL_REGEXP = re.compile(r"""^'[^'"\\]{0,255}'""")

IN_CLAUSE_REGEXP = re.compile(r"^\((?:[^)]+)\)")

STANDARD_OPERATOR_REGEXP = re.compile(
    r"^(<=|>=|!=|<|>|=|!~~\*|!~~|!~\*|!~|~~\*|~~|~\*|~|\?"
    r"|NOT ILIKE|NOT LIKE|ILIKE|LIKE)"
)
IMPORT_OPERATOR_REGEXP = re.compile(r"^(<=|>=|<|>|=|!=|IN|NOT IN)")

COMPARISON_OPERATORS = ("=", "!=", "<", "<=", ">", ">=")
EQUALITY_OPERATORS = ("=", "!=")
CONTAINS_OPERATOR = "?"
IMPORT_SUPPORTED_OPERATORS = ("=", "!=", IN_OPERATOR, NOT_IN_OPERATOR)


@dataclass(frozen=True)
class OperatorSet:
    """Operators a parsing mode recognizes, and optionally a whitelist.

    ``pattern`` decides which operators the parser can read at all.
    ``allowed``, when set, is checked again after the whole query parsed.
    """

    name: str
    pattern: "re.Pattern[str]"
    allowed: Optional[Tuple[str, ...]] = None

    def match(self, text: str) -> Optional[str]:
        m = self.pattern.match(text)
        return m.group(0) if m else None

    def is_allowed(self, operator: str) -> bool:
        if self.allowed is None:
            return True
        return operator in self.allowed


STANDARD_OPERATORS = OperatorSet("standard", STANDARD_OPERATOR_REGEXP)
IMPORT_OPERATORS = OperatorSet(
    "import", IMPORT_OPERATOR_REGEXP, allowed=IMPORT_SUPPORTED_OPERATORS
)


__all__ = [
    "AND_OPERATOR",
    "BOOLEAN_LITERAL_REGEXP",
    "COMPARISON_OPERATORS",
    "CONTAINS_OPERATOR",
    "EQUALITY_OPERATORS",
    "IMPORT_OPERATORS",
    "IMPORT_OPTION_PREFIX",
    "IMPORT_SUPPORTED_OPERATORS",
    "INTEGER_LITERAL_REGEXP",
    "IN_CLAUSE_REGEXP",
    "IN_OPERATOR",
    "LOGICAL_OPERATOR_REGEXP",
    "NOT_IN_OPERATOR",
    "OperatorSet",
    "PATH_REGEXP",
    "SPLIT_MARKER",
    "STANDARD_OPERATORS",
    "STRING_LITERAL_REGEXP",
    "WHITESPACE_REGEXP",
]
