"""Condition tree nodes.

A condition tree is an ordered list of nodes. Each node carries a `boolean`
connector (`AND` / `OR`) joining it to the node before it; the connector of
the first node in a tree is ignored. Three node kinds exist:

- `Condition`: `column operator value`
- `RawCondition`: an opaque SQL fragment interpreted by the backend
- `ConditionGroup`: a nested tree, rendered as one parenthesised term

Nodes are immutable once built; `with_boolean` returns a re-tagged copy and
`to_dict` hands out copies of the stored values.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List, Optional, Sequence

from ..constants import Boolean
from ..exceptions import InvalidValueError, QueryError
from ..utils import normalize_value
from .operators import LIST_OPERATORS, NULL_OPERATORS, PATTERN_OPERATORS, RAW_OPERATOR, normalize_operator

__all__ = (
    "ConditionNode",
    "Condition",
    "RawCondition",
    "ConditionGroup",
    "normalize_boolean",
)


def normalize_boolean(boolean: str) -> str:
    value = str(boolean).upper()
    if value not in (Boolean.AND, Boolean.OR):
        raise QueryError("Boolean connector must be AND or OR", boolean=boolean)
    return value


class ConditionNode:
    """Base class for condition tree nodes."""

    boolean: str = Boolean.AND

    def with_boolean(self, boolean: str) -> "ConditionNode":
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        """Return the wire representation of this node, connector included."""
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConditionNode):
            return NotImplemented
        return type(self) is type(other) and self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(repr(self.to_dict()))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.to_dict()}>"


class Condition(ConditionNode):
    """Structured comparison `column operator value`.

    The value is checked against the operator when the node is built:
    `in`/`not in` need a sequence, `between` a pair, `like`/`ilike` a string,
    and the null checks take no value.
    """

    def __init__(self, column: str, operator: str, value: Any = None, boolean: str = Boolean.AND) -> None:
        if not isinstance(column, str) or not column:
            raise QueryError("Column name must be a non-empty string", column=column)
        op = normalize_operator(operator)
        self.column = column
        self.operator = op
        self.value = self._check_value(column, op, value)
        self.boolean = normalize_boolean(boolean)

    @staticmethod
    def _check_value(column: str, op: str, value: Any) -> Any:
        if op in NULL_OPERATORS:
            return None
        if op in LIST_OPERATORS:
            if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
                raise InvalidValueError(f"'{op}' expects a sequence of values", column=column, value=value)
            return normalize_value(list(value), path=column)
        if op == "between":
            if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)) or len(value) != 2:
                raise InvalidValueError("'between' expects a (low, high) pair", column=column, value=value)
            return normalize_value(list(value), path=column)
        if op in PATTERN_OPERATORS and not isinstance(value, str):
            raise InvalidValueError(f"'{op}' expects a string pattern", column=column, value=value)
        return normalize_value(value, path=column)

    def with_boolean(self, boolean: str) -> "Condition":
        return Condition(self.column, self.operator, self.value, boolean)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": self.column,
            "operator": self.operator,
            "value": deepcopy(self.value),
            "boolean": self.boolean,
        }


class RawCondition(ConditionNode):
    """Opaque SQL fragment passed through to the backend with its parameters."""

    def __init__(self, sql: str, params: Optional[Sequence[Any]] = None, boolean: str = Boolean.AND) -> None:
        if not isinstance(sql, str) or not sql.strip():
            raise QueryError("Raw condition needs a non-empty SQL fragment", sql=sql)
        if params is not None and (isinstance(params, (str, bytes)) or not isinstance(params, (list, tuple))):
            raise InvalidValueError("Raw condition params must be a sequence", params=params)
        self.sql = sql
        self.params: List[Any] = normalize_value(list(params or []), path="params")
        self.boolean = normalize_boolean(boolean)

    @property
    def column(self) -> str:
        return ""

    @property
    def operator(self) -> str:
        return RAW_OPERATOR

    def with_boolean(self, boolean: str) -> "RawCondition":
        return RawCondition(self.sql, self.params, boolean)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": "",
            "operator": RAW_OPERATOR,
            "value": {"sql": self.sql, "params": deepcopy(self.params)},
            "boolean": self.boolean,
        }


class ConditionGroup(ConditionNode):
    """Nested condition tree evaluated as a single term of its parent."""

    def __init__(self, nodes: Sequence[ConditionNode], boolean: str = Boolean.AND) -> None:
        nodes = list(nodes)
        if not nodes:
            raise QueryError("Condition group cannot be empty")
        for node in nodes:
            if not isinstance(node, ConditionNode):
                raise QueryError("Condition group members must be condition nodes", member=node)
        self.nodes: List[ConditionNode] = nodes
        self.boolean = normalize_boolean(boolean)

    def with_boolean(self, boolean: str) -> "ConditionGroup":
        return ConditionGroup(self.nodes, boolean)

    def __len__(self) -> int:
        return len(self.nodes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group": [node.to_dict() for node in self.nodes],
            "boolean": self.boolean,
        }
