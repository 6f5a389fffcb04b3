"""Debug SQL compiler.

Renders a `QueryDescriptor` as a human-readable SQL string. The output is
for logging and troubleshooting only; it is never sent to the server and is
not guaranteed to be executable on any particular engine.

Rendering rules:
- Groups are parenthesised; the first node of each tree drops its connector
- Raw fragments have `?` placeholders replaced by their formatted params
- `between` renders as `BETWEEN low AND high`, null checks take no value
"""

import json
from typing import Any, List, Sequence

from ...constants import QueryType
from ..conditions import ConditionGroup, ConditionNode, RawCondition
from .base import BaseCompiler
from .utils import format_value_sql, normalize_descriptor_input

__all__ = (
    "SqlCompiler",
    "sql_compiler",
)

_JOIN_KEYWORDS = {
    "inner": "INNER JOIN",
    "left": "LEFT JOIN",
    "right": "RIGHT JOIN",
    "full": "FULL JOIN",
}


class SqlCompiler(BaseCompiler):
    """Compile query descriptors into debug SQL strings."""

    def compile(self, descriptor: Any) -> str:
        d = normalize_descriptor_input(descriptor)
        if d.type == QueryType.INSERT:
            return self._insert(d)
        if d.type == QueryType.UPDATE:
            return self._update(d)
        if d.type == QueryType.DELETE:
            return self._delete(d)
        return self._select(d)

    def compile_conditions(self, nodes: Sequence[ConditionNode]) -> str:
        parts: List[str] = []
        for i, node in enumerate(nodes):
            expr = self._node_to_expr(node)
            parts.append(expr if i == 0 else f"{node.boolean} {expr}")
        return " ".join(parts)

    def _node_to_expr(self, node: ConditionNode) -> str:
        """Recursively transform one node into a SQL expression."""
        if isinstance(node, ConditionGroup):
            return "(" + self.compile_conditions(node.nodes) + ")"
        if isinstance(node, RawCondition):
            return self._substitute(node.sql, node.params)
        op = node.operator
        if op in ("is null", "is not null"):
            return f"{node.column} {op.upper()}"
        if op == "between":
            low, high = node.value
            return f"{node.column} BETWEEN {format_value_sql(low)} AND {format_value_sql(high)}"
        return f"{node.column} {op.upper()} {format_value_sql(node.value)}"

    @staticmethod
    def _substitute(sql: str, params: Sequence[Any]) -> str:
        pieces = sql.split("?")
        if len(pieces) - 1 != len(params):
            # Placeholder count mismatch: show the fragment untouched
            return sql
        out = pieces[0]
        for value, piece in zip(params, pieces[1:]):
            out += format_value_sql(value) + piece
        return out

    # -------------------
    # Statements
    # -------------------
    def _select(self, d: Any) -> str:
        columns = ", ".join(d.columns) if d.columns else "*"
        sql = f"SELECT {'DISTINCT ' if d.distinct else ''}{columns} FROM {d.table}"
        for join in d.joins:
            sql += (
                f" {_JOIN_KEYWORDS[join.kind]} {join.table}"
                f" ON {join.first_column} {join.operator} {join.second_column}"
            )
        if d.where:
            sql += " WHERE " + self.compile_conditions(d.where)
        if d.group_by:
            sql += " GROUP BY " + ", ".join(d.group_by)
        if d.having:
            sql += " HAVING " + self.compile_conditions(d.having)
        if d.order_by:
            sql += " ORDER BY " + ", ".join(f"{o.column} {o.direction.upper()}" for o in d.order_by)
        if d.limit is not None:
            sql += f" LIMIT {d.limit}"
        if d.offset is not None:
            sql += f" OFFSET {d.offset}"
        return sql

    def _insert(self, d: Any) -> str:
        rows = d.insert_data if isinstance(d.insert_data, list) else [d.insert_data]
        columns: List[str] = []
        for row in rows:
            for key in row:
                if key not in columns:
                    columns.append(key)
        values = ", ".join(
            "(" + ", ".join(self._literal(row.get(c)) for c in columns) + ")" for row in rows
        )
        sql = f"INSERT INTO {d.table} ({', '.join(columns)}) VALUES {values}"
        return sql + self._returning(d)

    def _update(self, d: Any) -> str:
        assignments = ", ".join(f"{k} = {self._literal(v)}" for k, v in d.update_data.items())
        sql = f"UPDATE {d.table} SET {assignments}"
        if d.where:
            sql += " WHERE " + self.compile_conditions(d.where)
        return sql + self._returning(d)

    def _delete(self, d: Any) -> str:
        sql = f"DELETE FROM {d.table}"
        if d.where:
            sql += " WHERE " + self.compile_conditions(d.where)
        return sql + self._returning(d)

    @staticmethod
    def _returning(d: Any) -> str:
        return f" RETURNING {', '.join(d.returning)}" if d.returning else ""

    @staticmethod
    def _literal(value: Any) -> str:
        # Nested payload values are stored as JSON
        if isinstance(value, (list, dict)):
            return format_value_sql(json.dumps(value, sort_keys=True))
        return format_value_sql(value)


sql_compiler = SqlCompiler()
