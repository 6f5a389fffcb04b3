"""Fluent query builder.

`QueryBuilder` accumulates clauses through chained calls and turns them into a
`QueryDescriptor`, which compiles to the JSON body of the generic query
endpoint (`to_query`) or to a debug SQL string (`to_sql`).

Typical usage:

    users = (
        client.from_("users")
        .where("active", True)
        .or_(lambda q: q.where("role", "admin"), lambda q: q.gt("age", 30))
        .order_by("created_at", "desc")
        .limit(10)
        .get()
    )

The builder is mutable: every clause method changes the instance and returns
it. Use `clone()` before branching one chain into several queries. Terminal
operations (`execute`, `get`, `first`, `value`, `count`, `exists`) run against
an internal copy, so they never change what `to_query()` returns.

The query type is a one-way state: unset (implicit select) moves to `insert`,
`update` or `delete` on the first mutation call. Switching to a different
mutation, or calling select-only clauses afterwards, raises `QueryStateError`.
"""

from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

from ..constants import API_ENDPOINTS, Boolean, Direction, JoinKind, QueryType
from ..exceptions import (
    ConfigurationError,
    InvalidPaginationError,
    InvalidValueError,
    QueryError,
    QueryStateError,
    ServiceError,
)
from ..logger import Logger
from ..schema import QueryResult
from ..types import BuilderCallback, Row, RowData, Rows, Value
from ..utils import envelope_error, normalize_rows, normalize_value
from .conditions import Condition, ConditionGroup, ConditionNode, RawCondition
from .descriptor import JoinClause, OrderClause, QueryDescriptor
from .operators import normalize_join_operator

if TYPE_CHECKING:
    from ..http import HttpClient

__all__ = ("QueryBuilder",)

_MISSING = object()


class QueryBuilder:
    """Chainable builder for one logical query.

    Args:
        http: Transport used by terminal operations. A builder without one can
            still be composed and inspected with `to_query`/`to_sql`.
        logger: Logger for debug output of executed queries
    """

    def __init__(self, http: Optional["HttpClient"] = None, logger: Optional[Logger] = None) -> None:
        self._http = http
        self._logger = logger or Logger(__name__)
        self._table: Optional[str] = None
        self._type: Optional[str] = None
        self._columns: List[str] = []
        self._distinct = False
        self._where: List[ConditionNode] = []
        self._joins: List[JoinClause] = []
        self._group_by: List[str] = []
        self._having: List[ConditionNode] = []
        self._order_by: List[OrderClause] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None
        self._returning: List[str] = []
        self._insert_data: Any = None
        self._update_data: Optional[Dict[str, Any]] = None

    def __repr__(self) -> str:
        return f"<QueryBuilder: {self._type or QueryType.SELECT} {self._table!r}>"

    # -------------------
    # State helpers
    # -------------------
    @property
    def query_type(self) -> str:
        """Current query type; `select` until a mutation is requested."""
        return self._type or QueryType.SELECT

    def _require_select(self, operation: str) -> None:
        if self._type is not None:
            raise QueryStateError(
                f"{operation}() is only valid on select queries",
                operation=operation,
                current=self._type,
            )

    def _set_type(self, query_type: str) -> None:
        if self._type is not None and self._type != query_type:
            raise QueryStateError(
                f"Query type is already {self._type!r}; cannot change it to {query_type!r}",
                current=self._type,
                requested=query_type,
            )
        self._type = query_type

    def _sub_builder(self) -> "QueryBuilder":
        sub = QueryBuilder(logger=self._logger)
        sub._table = self._table
        return sub

    @staticmethod
    def _run_callback(callback: BuilderCallback, sub: "QueryBuilder") -> List[ConditionNode]:
        if not callable(callback):
            raise QueryError("Group callback must be callable", callback=callback)
        callback(sub)
        return list(sub._where)

    def clone(self) -> "QueryBuilder":
        """Return an independent copy of this builder sharing only the transport."""
        other = QueryBuilder(self._http, self._logger)
        other._table = self._table
        other._type = self._type
        other._columns = list(self._columns)
        other._distinct = self._distinct
        # Condition nodes and clause models are immutable
        other._where = list(self._where)
        other._joins = list(self._joins)
        other._group_by = list(self._group_by)
        other._having = list(self._having)
        other._order_by = list(self._order_by)
        other._limit = self._limit
        other._offset = self._offset
        other._returning = list(self._returning)
        other._insert_data = deepcopy(self._insert_data)
        other._update_data = deepcopy(self._update_data)
        return other

    # -------------------
    # Source and projection
    # -------------------
    def from_(self, table: str) -> "QueryBuilder":
        if not isinstance(table, str) or not table:
            raise QueryError("Table name must be a non-empty string", table=table)
        self._table = table
        return self

    table = from_

    def select(self, *columns: str) -> "QueryBuilder":
        """Append columns to the projection; no columns means all columns."""
        self._require_select("select")
        for column in columns:
            if isinstance(column, (list, tuple)):
                self._columns.extend(column)
            else:
                self._columns.append(column)
        return self

    def distinct(self) -> "QueryBuilder":
        self._require_select("distinct")
        self._distinct = True
        return self

    # -------------------
    # Where clauses
    # -------------------
    def _add_condition(
        self,
        target: List[ConditionNode],
        column: str,
        operator: Any,
        value: Any,
        boolean: str,
    ) -> "QueryBuilder":
        if value is _MISSING:
            if operator is _MISSING:
                raise QueryError("Condition needs a value", column=column)
            operator, value = "=", operator
        target.append(Condition(column, operator, value, boolean))
        return self

    def _check_where(self, operation: str) -> None:
        if self._type == QueryType.INSERT:
            raise QueryStateError(
                f"{operation}() is not valid on insert queries",
                operation=operation,
                current=self._type,
            )

    def where(self, column: str, operator: Any = _MISSING, value: Any = _MISSING) -> "QueryBuilder":
        """Add an AND condition.

        `where("age", 18)` compares with `=`; `where("age", ">=", 18)` names the
        operator explicitly.
        """
        self._check_where("where")
        return self._add_condition(self._where, column, operator, value, Boolean.AND)

    def or_where(self, column: str, operator: Any = _MISSING, value: Any = _MISSING) -> "QueryBuilder":
        self._check_where("or_where")
        return self._add_condition(self._where, column, operator, value, Boolean.OR)

    def _cond(self, column: str, operator: str, value: Any, boolean: str) -> "QueryBuilder":
        self._check_where("where")
        self._where.append(Condition(column, operator, value, boolean))
        return self

    # AND shorthands
    def gt(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, ">", value, Boolean.AND)

    def gte(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, ">=", value, Boolean.AND)

    def lt(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, "<", value, Boolean.AND)

    def lte(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, "<=", value, Boolean.AND)

    def ne(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, "!=", value, Boolean.AND)

    def in_(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._cond(column, "in", values, Boolean.AND)

    def not_in(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._cond(column, "not in", values, Boolean.AND)

    def like(self, column: str, pattern: str) -> "QueryBuilder":
        return self._cond(column, "like", pattern, Boolean.AND)

    def ilike(self, column: str, pattern: str) -> "QueryBuilder":
        return self._cond(column, "ilike", pattern, Boolean.AND)

    def is_null(self, column: str) -> "QueryBuilder":
        return self._cond(column, "is null", None, Boolean.AND)

    def is_not_null(self, column: str) -> "QueryBuilder":
        return self._cond(column, "is not null", None, Boolean.AND)

    def between(self, column: str, low: Value, high: Value) -> "QueryBuilder":
        return self._cond(column, "between", [low, high], Boolean.AND)

    where_in = in_
    where_not_in = not_in
    where_null = is_null
    where_not_null = is_not_null
    where_between = between
    where_like = like
    where_ilike = ilike

    # OR shorthands
    def or_gt(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, ">", value, Boolean.OR)

    def or_gte(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, ">=", value, Boolean.OR)

    def or_lt(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, "<", value, Boolean.OR)

    def or_lte(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, "<=", value, Boolean.OR)

    def or_ne(self, column: str, value: Value) -> "QueryBuilder":
        return self._cond(column, "!=", value, Boolean.OR)

    def or_in(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._cond(column, "in", values, Boolean.OR)

    def or_not_in(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._cond(column, "not in", values, Boolean.OR)

    def or_like(self, column: str, pattern: str) -> "QueryBuilder":
        return self._cond(column, "like", pattern, Boolean.OR)

    def or_ilike(self, column: str, pattern: str) -> "QueryBuilder":
        return self._cond(column, "ilike", pattern, Boolean.OR)

    def or_is_null(self, column: str) -> "QueryBuilder":
        return self._cond(column, "is null", None, Boolean.OR)

    def or_is_not_null(self, column: str) -> "QueryBuilder":
        return self._cond(column, "is not null", None, Boolean.OR)

    def or_between(self, column: str, low: Value, high: Value) -> "QueryBuilder":
        return self._cond(column, "between", [low, high], Boolean.OR)

    # Grouping
    def or_(self, *callbacks: BuilderCallback) -> "QueryBuilder":
        """Append one OR-tagged group with one alternative per callback.

        Each callback receives a fresh sub-builder. A callback that adds a single
        condition contributes that condition; one that adds several contributes
        a nested group keeping its own AND/OR structure. Callbacks adding nothing
        are skipped, and nothing is appended when all of them are empty.
        """
        self._check_where("or_")
        alternatives: List[ConditionNode] = []
        for callback in callbacks:
            nodes = self._run_callback(callback, self._sub_builder())
            if not nodes:
                continue
            if len(nodes) == 1:
                alternatives.append(nodes[0].with_boolean(Boolean.OR))
            else:
                alternatives.append(ConditionGroup(nodes, Boolean.OR))
        if alternatives:
            self._where.append(ConditionGroup(alternatives, Boolean.OR))
        return self

    def where_group(self, callback: BuilderCallback) -> "QueryBuilder":
        """Append the callback's conditions as one parenthesised AND term."""
        self._check_where("where_group")
        nodes = self._run_callback(callback, self._sub_builder())
        if nodes:
            self._where.append(ConditionGroup(nodes, Boolean.AND))
        return self

    def or_where_group(self, callback: BuilderCallback) -> "QueryBuilder":
        self._check_where("or_where_group")
        nodes = self._run_callback(callback, self._sub_builder())
        if nodes:
            self._where.append(ConditionGroup(nodes, Boolean.OR))
        return self

    # Raw fragments
    def where_raw(self, sql: str, params: Optional[Sequence[Any]] = None) -> "QueryBuilder":
        """Append an opaque SQL fragment; `?` placeholders bind to `params`."""
        self._check_where("where_raw")
        self._where.append(RawCondition(sql, params, Boolean.AND))
        return self

    def or_where_raw(self, sql: str, params: Optional[Sequence[Any]] = None) -> "QueryBuilder":
        self._check_where("or_where_raw")
        self._where.append(RawCondition(sql, params, Boolean.OR))
        return self

    # -------------------
    # Joins
    # -------------------
    def _add_join(self, kind: str, table: str, first_column: str, operator: str, second_column: str) -> "QueryBuilder":
        self._require_select(f"{kind}_join" if kind != JoinKind.INNER else "join")
        for name, value in (("table", table), ("first_column", first_column), ("second_column", second_column)):
            if not isinstance(value, str) or not value:
                raise QueryError(f"Join {name} must be a non-empty string", **{name: value})
        self._joins.append(
            JoinClause(
                table=table,
                first_column=first_column,
                operator=normalize_join_operator(operator),
                second_column=second_column,
                kind=kind,
            )
        )
        return self

    def join(self, table: str, first_column: str, operator: str, second_column: str) -> "QueryBuilder":
        return self._add_join(JoinKind.INNER, table, first_column, operator, second_column)

    inner_join = join

    def left_join(self, table: str, first_column: str, operator: str, second_column: str) -> "QueryBuilder":
        return self._add_join(JoinKind.LEFT, table, first_column, operator, second_column)

    def right_join(self, table: str, first_column: str, operator: str, second_column: str) -> "QueryBuilder":
        return self._add_join(JoinKind.RIGHT, table, first_column, operator, second_column)

    def full_join(self, table: str, first_column: str, operator: str, second_column: str) -> "QueryBuilder":
        return self._add_join(JoinKind.FULL, table, first_column, operator, second_column)

    # -------------------
    # Grouping, ordering, windowing
    # -------------------
    def group_by(self, *columns: str) -> "QueryBuilder":
        self._require_select("group_by")
        for column in columns:
            if isinstance(column, (list, tuple)):
                self._group_by.extend(column)
            else:
                self._group_by.append(column)
        return self

    def having(self, column: str, operator: Any = _MISSING, value: Any = _MISSING) -> "QueryBuilder":
        self._require_select("having")
        return self._add_condition(self._having, column, operator, value, Boolean.AND)

    def or_having(self, column: str, operator: Any = _MISSING, value: Any = _MISSING) -> "QueryBuilder":
        self._require_select("or_having")
        return self._add_condition(self._having, column, operator, value, Boolean.OR)

    def order_by(self, column: str, direction: str = Direction.ASC) -> "QueryBuilder":
        """Append a sort key; repeated calls sort by each key in call order."""
        self._require_select("order_by")
        if not isinstance(column, str) or not column:
            raise QueryError("Order column must be a non-empty string", column=column)
        normalized = str(direction).lower()
        if normalized not in (Direction.ASC, Direction.DESC):
            raise QueryError("Order direction must be 'asc' or 'desc'", column=column, direction=direction)
        self._order_by.append(OrderClause(column=column, direction=normalized))
        return self

    @staticmethod
    def _check_count(name: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidPaginationError(f"{name} must be a non-negative integer", **{name: value})
        return value

    def limit(self, count: int) -> "QueryBuilder":
        self._require_select("limit")
        self._limit = self._check_count("limit", count)
        return self

    def offset(self, count: int) -> "QueryBuilder":
        self._require_select("offset")
        self._offset = self._check_count("offset", count)
        return self

    def paginate(self, page: int, per_page: int = 20) -> "QueryBuilder":
        """Set `limit = per_page` and `offset = (page - 1) * per_page`.

        Raises:
            InvalidPaginationError: If page or per_page is below one
        """
        self._require_select("paginate")
        for name, value in (("page", page), ("per_page", per_page)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidPaginationError(f"{name} must be an integer >= 1", **{name: value})
        self._limit = per_page
        self._offset = (page - 1) * per_page
        return self

    # -------------------
    # Mutations
    # -------------------
    def insert(self, data: RowData) -> "QueryBuilder":
        """Turn the query into an insert of one row or many.

        Calling `insert` again appends the new rows.
        """
        rows = normalize_rows(data)
        self._set_type(QueryType.INSERT)
        if self._insert_data is None:
            self._insert_data = rows
        else:
            existing = self._insert_data if isinstance(self._insert_data, list) else [self._insert_data]
            self._insert_data = existing + (rows if isinstance(rows, list) else [rows])
        return self

    def update(self, data: Mapping[str, Any]) -> "QueryBuilder":
        """Turn the query into an update; repeated calls merge the assignments."""
        if not isinstance(data, Mapping) or not data:
            raise InvalidValueError("Update data must be a non-empty mapping", type=type(data).__name__)
        values = normalize_value(data, path="data")
        self._set_type(QueryType.UPDATE)
        self._update_data = {**(self._update_data or {}), **values}
        return self

    def delete(self) -> "QueryBuilder":
        self._set_type(QueryType.DELETE)
        return self

    def returning(self, *columns: str) -> "QueryBuilder":
        for column in columns:
            if isinstance(column, (list, tuple)):
                self._returning.extend(column)
            else:
                self._returning.append(column)
        return self

    # -------------------
    # Aggregates
    # -------------------
    def _aggregate(self, function: str, column: str, alias: Optional[str]) -> "QueryBuilder":
        self._require_select(function.lower())
        if not isinstance(column, str) or not column:
            raise QueryError("Aggregate column must be a non-empty string", column=column)
        self._columns.append(f"{function}({column}) AS {alias or function.lower()}")
        return self

    def sum(self, column: str, alias: Optional[str] = None) -> "QueryBuilder":
        return self._aggregate("SUM", column, alias)

    def avg(self, column: str, alias: Optional[str] = None) -> "QueryBuilder":
        return self._aggregate("AVG", column, alias)

    def min(self, column: str, alias: Optional[str] = None) -> "QueryBuilder":
        return self._aggregate("MIN", column, alias)

    def max(self, column: str, alias: Optional[str] = None) -> "QueryBuilder":
        return self._aggregate("MAX", column, alias)

    # -------------------
    # Compiled representations
    # -------------------
    def descriptor(self) -> QueryDescriptor:
        """Return the validated descriptor composed so far."""
        if not self._table:
            raise QueryError("Table not set; call from_() first", operation="descriptor")
        query_type = self.query_type
        return QueryDescriptor(
            type=query_type,
            table=self._table,
            columns=self._columns,
            distinct=self._distinct,
            where=self._where,
            joins=self._joins,
            group_by=self._group_by,
            having=self._having,
            order_by=self._order_by,
            limit=self._limit,
            offset=self._offset,
            returning=self._returning,
            insert_data=deepcopy(self._insert_data) if query_type == QueryType.INSERT else None,
            update_data=deepcopy(self._update_data) if query_type == QueryType.UPDATE else None,
        )

    def to_query(self) -> Dict[str, Any]:
        """Return the JSON body that terminal operations send."""
        return self.descriptor().to_dict()

    def to_sql(self) -> str:
        """Return a best-effort SQL rendering for debugging; never sent."""
        return self.descriptor().to_sql()

    # -------------------
    # Terminal operations
    # -------------------
    def _run(self) -> QueryResult:
        if self._http is None:
            raise ConfigurationError(
                "QueryBuilder has no HTTP client; create it through FluxezClient",
                operation="execute",
            )
        body = self.to_query()
        self._logger.debug("Executing %s query on %s", body["type"], body["table"])
        response = self._http.post(API_ENDPOINTS["QUERY_EXECUTE"], json=body)
        message = envelope_error(response, default="Query failed")
        if message is not None:
            self._logger.warning("%s query on %s rejected: %s", body["type"], body["table"], message)
            raise ServiceError(message, operation="execute", table=body["table"])
        return QueryResult.from_response(response)

    def execute(self) -> QueryResult:
        """Send the query and return rows, count and metadata."""
        return self.clone()._run()

    def get(self) -> Rows:
        return self.execute().data

    def first(self) -> Optional[Row]:
        """Return the first row, or None when nothing matches."""
        query = self.clone()
        if query._type is None:
            query._limit = 1
        rows = query._run().data
        return rows[0] if rows else None

    single = first

    def value(self, column: str) -> Any:
        """Return `column` from the first matching row, or None."""
        self._require_select("value")
        query = self.clone()
        query._columns = [column]
        query._limit = 1
        rows = query._run().data
        if not rows:
            return None
        row = rows[0]
        if column in row:
            return row[column]
        # Qualified names come back unqualified ("users.email" -> "email")
        short = column.rsplit(".", 1)[-1]
        if short in row:
            return row[short]
        if len(row) == 1:
            return next(iter(row.values()))
        return None

    def count(self, column: str = "*") -> int:
        """Return the number of matching rows.

        Grouping, having, order, limit and offset are dropped for the count
        query, so the result is the number of rows matching `where` and the
        joins, never a per-group count.
        """
        self._require_select("count")
        query = self.clone()
        if query._distinct and column != "*":
            expression = f"COUNT(DISTINCT {column}) AS count"
            query._distinct = False
        else:
            expression = f"COUNT({column}) AS count"
        query._columns = [expression]
        query._group_by = []
        query._having = []
        query._order_by = []
        query._limit = None
        query._offset = None
        result = query._run()
        if not result.data:
            return result.count or 0
        row = result.data[0]
        value = row["count"] if "count" in row else next(iter(row.values()), 0)
        return int(value or 0)

    def exists(self) -> bool:
        """Return True if at least one row matches."""
        self._require_select("exists")
        query = self.clone()
        query._columns = ["1"]
        query._order_by = []
        query._limit = 1
        query._offset = None
        result = query._run()
        return bool(result.data) or bool(result.count)
