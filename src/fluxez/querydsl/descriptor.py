"""Typed query descriptor.

`QueryDescriptor` is the validated snapshot a `QueryBuilder` produces. It keeps
every clause the builder accumulated; the compilers decide which clauses are
relevant to the descriptor's `type` when serializing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..constants import Direction, JoinKind, QueryType
from .conditions import ConditionNode

__all__ = (
    "JoinClause",
    "OrderClause",
    "QueryDescriptor",
)


class JoinClause(BaseModel):
    """One join, applied in the order it was added."""

    model_config = ConfigDict(frozen=True)

    table: str = Field(..., min_length=1)
    first_column: str = Field(..., min_length=1)
    operator: str
    second_column: str = Field(..., min_length=1)
    kind: Literal["inner", "left", "right", "full"] = JoinKind.INNER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "firstColumn": self.first_column,
            "operator": self.operator,
            "secondColumn": self.second_column,
            "kind": self.kind,
        }


class OrderClause(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str = Field(..., min_length=1)
    direction: Literal["asc", "desc"] = Direction.ASC

    def to_dict(self) -> Dict[str, Any]:
        return {"column": self.column, "direction": self.direction}


class QueryDescriptor(BaseModel):
    """Backend-agnostic representation of one query."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Literal["select", "insert", "update", "delete"] = QueryType.SELECT
    table: str = Field(..., min_length=1)
    columns: List[str] = Field(default_factory=list)
    distinct: bool = False
    where: List[ConditionNode] = Field(default_factory=list)
    joins: List[JoinClause] = Field(default_factory=list)
    group_by: List[str] = Field(default_factory=list)
    having: List[ConditionNode] = Field(default_factory=list)
    order_by: List[OrderClause] = Field(default_factory=list)
    limit: Optional[int] = Field(None, ge=0)
    offset: Optional[int] = Field(None, ge=0)
    returning: List[str] = Field(default_factory=list)
    insert_data: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None
    update_data: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def check_type_payload(self) -> "QueryDescriptor":
        if self.type == QueryType.INSERT:
            if self.insert_data is None:
                raise ValueError("insert query requires insert_data")
        elif self.insert_data is not None:
            raise ValueError(f"insert_data is not allowed on a {self.type} query")
        if self.type == QueryType.UPDATE:
            if not self.update_data:
                raise ValueError("update query requires update_data")
        elif self.update_data is not None:
            raise ValueError(f"update_data is not allowed on a {self.type} query")
        return self

    # -------------------
    # Compiled representations
    # -------------------
    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON body sent to the query endpoint."""
        from .compilers.wire import wire_compiler

        return wire_compiler.compile(self)

    def to_sql(self) -> str:
        """Return a best-effort SQL rendering for debugging."""
        from .compilers.sql import sql_compiler

        return sql_compiler.compile(self)
