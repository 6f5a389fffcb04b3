"""Compiler utility functions.

Helpers for normalizing compiler input and formatting SQL literals.
Identifiers are never quoted: table and column names pass through verbatim.
"""

import json
from typing import Any


def normalize_descriptor_input(query: Any) -> Any:
    """Accept a QueryBuilder or a QueryDescriptor and return the descriptor.

    Raises:
        TypeError: If input is neither
    """
    from ..descriptor import QueryDescriptor

    if isinstance(query, QueryDescriptor):
        return query
    if hasattr(query, "descriptor") and callable(query.descriptor):
        return query.descriptor()
    raise TypeError(f"query must be a QueryBuilder or QueryDescriptor, got {type(query).__name__}")


def format_value_sql(v: Any) -> str:
    """Format a Python value as a SQL literal (debug output only)."""
    if v is None:
        return "NULL"
    # bool before int: bool is an int subclass
    if isinstance(v, bool):
        return "TRUE" if v else "FALSE"
    if isinstance(v, str):
        return "'" + v.replace("'", "''") + "'"
    if isinstance(v, dict):
        return format_value_sql(json.dumps(v, sort_keys=True))
    if isinstance(v, (list, tuple)):
        inner = ", ".join(format_value_sql(x) for x in v)
        return f"({inner})"
    return str(v)
