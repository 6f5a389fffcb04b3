"""Query DSL module.

Exports `QueryBuilder` for composing queries fluently and the typed pieces it
produces. Compiled representations are handled by the `compilers` subpackage.
"""

from .builder import QueryBuilder
from .conditions import Condition, ConditionGroup, ConditionNode, RawCondition
from .descriptor import JoinClause, OrderClause, QueryDescriptor
from .operators import OPERATORS

__all__ = (
    "QueryBuilder",
    "Condition",
    "ConditionGroup",
    "ConditionNode",
    "RawCondition",
    "JoinClause",
    "OrderClause",
    "QueryDescriptor",
    "OPERATORS",
)
