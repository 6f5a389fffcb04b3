"""Wire compiler.

Transforms a `QueryDescriptor` into the JSON body accepted by the generic
query endpoint.

Only the clauses relevant to the descriptor type are emitted:
- select: columns, distinct, where, joins, groupBy, having, orderBy, limit, offset
- insert: insertData, returning
- update: updateData, where, returning
- delete: where, returning

Empty optional clauses are omitted. The first node of every condition tree
(and of every nested group) is always written with `boolean: "AND"`.
"""

from copy import deepcopy
from typing import Any, Dict, List, Sequence

from ...constants import Boolean, QueryType
from ..conditions import ConditionGroup, ConditionNode
from .base import BaseCompiler
from .utils import normalize_descriptor_input

__all__ = (
    "WireCompiler",
    "wire_compiler",
)


class WireCompiler(BaseCompiler):
    """Compile query descriptors into wire dicts."""

    def compile(self, descriptor: Any) -> Dict[str, Any]:
        d = normalize_descriptor_input(descriptor)
        out: Dict[str, Any] = {"type": d.type, "table": d.table}

        if d.type == QueryType.SELECT:
            out["columns"] = list(d.columns) or ["*"]
            if d.distinct:
                out["distinct"] = True
            if d.where:
                out["where"] = self.compile_conditions(d.where)
            if d.joins:
                out["joins"] = [j.to_dict() for j in d.joins]
            if d.group_by:
                out["groupBy"] = list(d.group_by)
            if d.having:
                out["having"] = self.compile_conditions(d.having)
            if d.order_by:
                out["orderBy"] = [o.to_dict() for o in d.order_by]
            if d.limit is not None:
                out["limit"] = d.limit
            if d.offset is not None:
                out["offset"] = d.offset
            return out

        if d.type == QueryType.INSERT:
            out["insertData"] = deepcopy(d.insert_data)
        elif d.type == QueryType.UPDATE:
            out["updateData"] = deepcopy(d.update_data)
        if d.type != QueryType.INSERT and d.where:
            out["where"] = self.compile_conditions(d.where)
        if d.returning:
            out["returning"] = list(d.returning)
        return out

    def compile_conditions(self, nodes: Sequence[ConditionNode]) -> List[Dict[str, Any]]:
        """Serialize a condition tree depth-first, preserving call order."""
        result: List[Dict[str, Any]] = []
        for i, node in enumerate(nodes):
            result.append(self._node_to_dict(node, first=(i == 0)))
        return result

    def _node_to_dict(self, node: ConditionNode, first: bool) -> Dict[str, Any]:
        """Recursively transform one node; groups recurse into their members."""
        boolean = Boolean.AND if first else node.boolean
        if isinstance(node, ConditionGroup):
            return {"group": self.compile_conditions(node.nodes), "boolean": boolean}
        data = node.to_dict()
        data["boolean"] = boolean
        return data


wire_compiler = WireCompiler()
