"""Operator vocabulary for condition and join clauses.

Operators are normalized to their lowercase wire spelling (`=`, `not in`,
`is null`, ...). Django-style lookups (`gte`, `nin`) and common SQL
spellings (`==`, `<>`) are accepted as aliases.
"""

from typing import Any

from ..exceptions import InvalidOperatorError

__all__ = (
    "OPERATORS",
    "COMPARISON_OPERATORS",
    "LIST_OPERATORS",
    "NULL_OPERATORS",
    "PATTERN_OPERATORS",
    "RAW_OPERATOR",
    "normalize_operator",
    "normalize_join_operator",
)

OPERATORS = (
    "=",
    "!=",
    ">",
    ">=",
    "<",
    "<=",
    "like",
    "ilike",
    "in",
    "not in",
    "between",
    "is null",
    "is not null",
)

COMPARISON_OPERATORS = frozenset({"=", "!=", ">", ">=", "<", "<="})
PATTERN_OPERATORS = frozenset({"like", "ilike"})
LIST_OPERATORS = frozenset({"in", "not in"})
NULL_OPERATORS = frozenset({"is null", "is not null"})

# Opaque pass-through condition produced by where_raw
RAW_OPERATOR = "raw"

_ALIASES = {
    "==": "=",
    "<>": "!=",
    "eq": "=",
    "ne": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "nin": "not in",
    "not_in": "not in",
    "isnull": "is null",
    "notnull": "is not null",
}


def normalize_operator(operator: Any) -> str:
    """Return the canonical spelling of a condition operator.

    Raises:
        InvalidOperatorError: If the operator is not a string or not supported
    """
    if not isinstance(operator, str):
        raise InvalidOperatorError(
            "Operator must be a string",
            operator=operator,
            supported=list(OPERATORS),
        )
    op = " ".join(operator.lower().split())
    op = _ALIASES.get(op, op)
    if op not in OPERATORS:
        raise InvalidOperatorError(
            f"Operator {operator!r} is not supported. Supported: {', '.join(OPERATORS)}",
            operator=operator,
        )
    return op


def normalize_join_operator(operator: Any) -> str:
    """Return the canonical spelling of a join comparison operator."""
    op = normalize_operator(operator)
    if op not in COMPARISON_OPERATORS:
        raise InvalidOperatorError(
            f"Join operator {operator!r} is not a comparison operator",
            operator=operator,
        )
    return op
