"""
Tests for QueryBuilder terminal operations over a mocked transport.
"""

import pytest

from fluxez.exceptions import ConfigurationError, QueryStateError, ServerError, ServiceError
from fluxez.querydsl import QueryBuilder


@pytest.fixture
def users(http):
    return QueryBuilder(http=http).from_("users")


class TestExecute:
    """execute/get post the descriptor to the query endpoint."""

    def test_get_posts_descriptor(self, server, users):
        server.queue(json={"rows": [{"id": 1}, {"id": 2}], "rowCount": 2})
        rows = users.where("active", True).get()
        assert rows == [{"id": 1}, {"id": 2}]
        assert len(server.requests) == 1
        assert server.last.method == "POST"
        assert server.path() == "/query/execute"
        assert server.body() == users.to_query()

    def test_execute_returns_result_with_metadata(self, server, users):
        server.queue(json={"rows": [{"id": 1}], "rowCount": 1, "executionTime": 4})
        result = users.execute()
        assert result.count == 1
        assert result.metadata == {"executionTime": 4}
        assert result.first() == {"id": 1}

    def test_data_key_accepted(self, server, users):
        server.queue(json={"data": [{"id": 9}]})
        assert users.get() == [{"id": 9}]

    def test_terminal_does_not_mutate_builder(self, server, users):
        users.where("a", 1)
        before = users.to_query()
        users.first()
        users.count()
        users.exists()
        assert users.to_query() == before

    def test_no_transport_raises(self):
        with pytest.raises(ConfigurationError):
            QueryBuilder().from_("users").get()

    def test_server_error_propagates_with_status(self, server, http):
        http.max_retries = 0
        server.queue(500, json={"message": "boom"})
        with pytest.raises(ServerError) as exc:
            QueryBuilder(http=http).from_("users").get()
        assert exc.value.status_code == 500
        assert exc.value.message == "boom"
        assert len(server.requests) == 1


class TestFirstAndValue:
    """Single-row helpers."""

    def test_first_sets_limit_one(self, server, users):
        server.queue(json={"rows": [{"id": 1}]})
        assert users.limit(50).first() == {"id": 1}
        assert server.body()["limit"] == 1

    def test_first_empty_returns_none(self, server, users):
        server.queue(json={"rows": []})
        assert users.single() is None

    def test_first_on_mutation_keeps_payload(self, server, users):
        server.queue(json={"rows": [{"id": 7}]})
        assert users.insert({"name": "a"}).returning("id").first() == {"id": 7}
        assert "limit" not in server.body()

    def test_value_selects_single_column(self, server, users):
        server.queue(json={"rows": [{"email": "a@b.c"}]})
        assert users.where("id", 1).value("users.email") == "a@b.c"
        body = server.body()
        assert body["columns"] == ["users.email"]
        assert body["limit"] == 1

    def test_value_missing_row_returns_none(self, server, users):
        server.queue(json={"rows": []})
        assert users.value("email") is None


class TestCount:
    """count issues one request and reads the count field."""

    def test_count_reads_count_field(self, server, users):
        server.queue(json={"rows": [{"count": "42"}]})
        assert users.where("active", True).order_by("id").limit(5).offset(5).count() == 42
        assert len(server.requests) == 1
        body = server.body()
        assert body["columns"] == ["COUNT(*) AS count"]
        assert "orderBy" not in body
        assert "limit" not in body
        assert "offset" not in body
        assert body["where"][0]["column"] == "active"

    def test_count_empty_table(self, server, users):
        server.queue(json={"rows": [{"count": 0}]})
        assert users.count() == 0

    def test_count_no_rows_falls_back_to_row_count(self, server, users):
        server.queue(json={"rows": []})
        assert users.count() == 0
        server.queue(json={"rows": [], "rowCount": 3})
        assert users.count() == 3

    def test_count_distinct_column(self, server, users):
        server.queue(json={"rows": [{"count": 2}]})
        assert users.distinct().count("country") == 2
        body = server.body()
        assert body["columns"] == ["COUNT(DISTINCT country) AS count"]
        assert "distinct" not in body

    def test_count_ignores_grouping(self, server, users):
        server.queue(json={"rows": [{"count": 9}]})
        assert users.group_by("country").having("n", ">", 1).count() == 9
        body = server.body()
        assert body["columns"] == ["COUNT(*) AS count"]
        assert "groupBy" not in body
        assert "having" not in body

    def test_count_rejected_on_mutation(self, users):
        with pytest.raises(QueryStateError):
            users.delete().count()


class TestExists:
    """exists probes one row."""

    def test_exists_true(self, server, users):
        server.queue(json={"rows": [{"1": 1}]})
        assert users.where("email", "a@b.c").exists() is True
        body = server.body()
        assert body["columns"] == ["1"]
        assert body["limit"] == 1

    def test_exists_false(self, server, users):
        server.queue(json={"rows": []})
        assert users.exists() is False


class TestRejectedEnvelope:
    """A 2xx body reporting `success: false` is an error, not an empty result."""

    REJECTED = {"success": False, "message": 'relation "users" does not exist'}

    @pytest.mark.parametrize("operation", ["get", "first", "count", "exists"])
    def test_terminal_raises(self, server, users, operation):
        server.queue(json=self.REJECTED)
        with pytest.raises(ServiceError) as exc:
            getattr(users, operation)()
        assert exc.value.message == 'relation "users" does not exist'
        assert len(server.requests) == 1

    def test_value_raises(self, server, users):
        server.queue(json=self.REJECTED)
        with pytest.raises(ServiceError):
            users.value("email")

    def test_default_message(self, server, users):
        server.queue(json={"success": False})
        with pytest.raises(ServiceError) as exc:
            users.execute()
        assert exc.value.message == "Query failed"

    def test_successful_envelope_unwrapped(self, server, users):
        server.queue(json={"success": True, "data": {"rows": [{"id": 1}], "rowCount": 1}})
        assert users.get() == [{"id": 1}]
