"""Type aliases for the fluxez package.

This module provides reusable type definitions to ensure consistency
across the codebase and improve code readability.
"""

from typing import Any, Callable, Dict, List, Mapping, Sequence, Union

# Closed set of values a condition or insert/update payload may carry
Scalar = Union[None, bool, int, float, str]
Value = Union[Scalar, Sequence[Any], Mapping[str, Any]]

# Result rows as returned by the query endpoint
Row = Dict[str, Any]
Rows = List[Row]

# Insert payloads - one row or many
RowData = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]

# Decoded JSON body
JSON = Union[Dict[str, Any], List[Any], str, int, float, bool, None]

# Callback receiving a sub-builder (used by or_/where_group)
BuilderCallback = Callable[[Any], Any]
