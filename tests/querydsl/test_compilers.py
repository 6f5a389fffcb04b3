"""
Tests for query compilers: wire dicts and debug SQL.
"""

import pytest

from fluxez.querydsl import QueryBuilder, QueryDescriptor
from fluxez.querydsl.compilers import SqlCompiler, WireCompiler, sql_compiler, wire_compiler
from fluxez.querydsl.compilers.utils import format_value_sql, normalize_descriptor_input
from fluxez.querydsl.conditions import Condition, ConditionGroup, RawCondition

COMPILERS = [
    ("wire", WireCompiler()),
    ("sql", SqlCompiler()),
]


@pytest.mark.parametrize("name,compiler", COMPILERS)
def test_compiler_accepts_builder_and_descriptor(name, compiler):
    builder = QueryBuilder().from_("users").where("a", 1)
    assert compiler.compile(builder) == compiler.compile(builder.descriptor())


@pytest.mark.parametrize("name,compiler", COMPILERS)
def test_compiler_rejects_invalid_input(name, compiler):
    with pytest.raises(TypeError):
        compiler.compile({"type": "select"})


def test_normalize_descriptor_input_passthrough():
    descriptor = QueryDescriptor(table="users")
    assert normalize_descriptor_input(descriptor) is descriptor


class TestWireCompiler:
    """Condition tree serialization."""

    def test_first_node_forced_and(self):
        nodes = [Condition("a", "=", 1, "OR"), Condition("b", "=", 2, "OR")]
        result = wire_compiler.compile_conditions(nodes)
        assert [n["boolean"] for n in result] == ["AND", "OR"]

    def test_first_node_forced_and_inside_groups(self):
        group = ConditionGroup([Condition("a", "=", 1, "OR"), Condition("b", "=", 2, "OR")], "OR")
        result = wire_compiler.compile_conditions([Condition("x", "=", 0), group])
        assert result[1]["boolean"] == "OR"
        assert [n["boolean"] for n in result[1]["group"]] == ["AND", "OR"]

    def test_raw_node(self):
        result = wire_compiler.compile_conditions([RawCondition("lower(email) = ?", ["a@b.c"])])
        assert result == [
            {"column": "", "operator": "raw", "value": {"sql": "lower(email) = ?", "params": ["a@b.c"]}, "boolean": "AND"}
        ]

    def test_select_emits_only_present_clauses(self):
        out = wire_compiler.compile(QueryDescriptor(table="t", limit=0))
        assert out == {"type": "select", "table": "t", "columns": ["*"], "limit": 0}

    def test_update_ignores_select_clauses(self):
        descriptor = QueryDescriptor(type="update", table="t", update_data={"a": 1}, limit=5, columns=["a"])
        assert wire_compiler.compile(descriptor) == {"type": "update", "table": "t", "updateData": {"a": 1}}

    def test_descriptor_type_payload_checked(self):
        with pytest.raises(ValueError):
            QueryDescriptor(type="insert", table="t")
        with pytest.raises(ValueError):
            QueryDescriptor(type="select", table="t", update_data={"a": 1})


class TestSqlCompiler:
    """Debug SQL rendering."""

    def test_groups_parenthesised(self):
        sql = (
            QueryBuilder()
            .from_("t")
            .where("a", 1)
            .where_group(lambda q: q.where("b", 2).or_where("c", 3))
            .to_sql()
        )
        assert sql == "SELECT * FROM t WHERE a = 1 AND (b = 2 OR c = 3)"

    def test_raw_rendered_with_params(self):
        sql = QueryBuilder().from_("t").where_raw("age > ? AND name = ?", [18, "O'Neil"]).to_sql()
        assert sql == "SELECT * FROM t WHERE age > 18 AND name = 'O''Neil'"

    def test_raw_placeholder_mismatch_left_verbatim(self):
        sql = QueryBuilder().from_("t").where_raw("age > ?", []).to_sql()
        assert sql == "SELECT * FROM t WHERE age > ?"

    def test_operators(self):
        sql = (
            QueryBuilder()
            .from_("t")
            .between("age", 18, 65)
            .is_not_null("email")
            .in_("id", [1, 2])
            .ilike("name", "a%")
            .to_sql()
        )
        assert sql == (
            "SELECT * FROM t WHERE age BETWEEN 18 AND 65 AND email IS NOT NULL"
            " AND id IN (1, 2) AND name ILIKE 'a%'"
        )

    def test_select_full(self):
        sql = (
            QueryBuilder()
            .from_("users")
            .distinct()
            .select("users.id", "COUNT(orders.id) AS n")
            .left_join("orders", "users.id", "=", "orders.user_id")
            .group_by("users.id")
            .having("n", ">", 2)
            .order_by("n", "desc")
            .limit(5)
            .offset(10)
            .to_sql()
        )
        assert sql == (
            "SELECT DISTINCT users.id, COUNT(orders.id) AS n FROM users"
            " LEFT JOIN orders ON users.id = orders.user_id"
            " GROUP BY users.id HAVING n > 2 ORDER BY n DESC LIMIT 5 OFFSET 10"
        )

    def test_insert_union_of_columns(self):
        sql = QueryBuilder().from_("t").insert([{"a": 1}, {"b": "x", "a": 2}]).returning("id").to_sql()
        assert sql == "INSERT INTO t (a, b) VALUES (1, NULL), (2, 'x') RETURNING id"

    def test_insert_nested_value_as_json(self):
        sql = sql_compiler.compile(QueryBuilder().from_("t").insert({"tags": ["a"], "meta": {"k": 1}}))
        assert sql == "INSERT INTO t (tags, meta) VALUES ('[\"a\"]', '{\"k\": 1}')"

    def test_update_and_delete(self):
        assert (
            QueryBuilder().from_("t").update({"a": None, "b": False}).where("id", 1).to_sql()
            == "UPDATE t SET a = NULL, b = FALSE WHERE id = 1"
        )
        assert QueryBuilder().from_("t").where("id", 1).delete().returning("id").to_sql() == (
            "DELETE FROM t WHERE id = 1 RETURNING id"
        )


class TestFormatValueSql:
    """SQL literal formatting."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "NULL"),
            (True, "TRUE"),
            (False, "FALSE"),
            (3, "3"),
            (2.5, "2.5"),
            ("it's", "'it''s'"),
            ([1, "a"], "(1, 'a')"),
            ({"b": 1, "a": 2}, "'{\"a\": 2, \"b\": 1}'"),
        ],
    )
    def test_literals(self, value, expected):
        assert format_value_sql(value) == expected
