"""Tests for the FluxezClient facade."""

import logging
from unittest.mock import patch

import pytest

from fluxez import FluxezClient, QueryBuilder
from fluxez.exceptions import MissingConfigError, ServerError, ServiceError
from fluxez.services import (
    AIClient,
    AnalyticsClient,
    AuthClient,
    CacheClient,
    EmailClient,
    QueueClient,
    SearchClient,
    StorageClient,
    WorkflowClient,
)

BASE_URL = "https://api.fluxez.test/api/v1"


class TestConstruction:
    """API key and context handling."""

    def test_missing_api_key_raises(self, test_settings):
        with pytest.raises(MissingConfigError):
            FluxezClient(settings=test_settings)

    def test_api_key_from_settings(self, server, test_settings):
        test_settings.FLUXEZ_API_KEY = "anon_from_env"
        client = FluxezClient(base_url=BASE_URL, transport=server.transport, settings=test_settings)
        client.health()
        assert server.last.headers["x-api-key"] == "anon_from_env"

    def test_unusual_key_prefix_warns(self, server, test_settings, caplog):
        with caplog.at_level(logging.WARNING, logger="fluxez"):
            FluxezClient("weird_key", transport=server.transport, settings=test_settings)
        assert any("service_" in r.getMessage() for r in caplog.records)

    def test_context_headers(self, server, test_settings):
        client = FluxezClient(
            "service_x",
            base_url=BASE_URL,
            organization_id="org1",
            project_id="proj1",
            app_id="app1",
            headers={"x-trace": "t"},
            transport=server.transport,
            settings=test_settings,
        )
        client.health()
        headers = server.last.headers
        assert headers["x-organization-id"] == "org1"
        assert headers["x-project-id"] == "proj1"
        assert headers["x-app-id"] == "app1"
        assert headers["x-trace"] == "t"

    def test_services_attached(self, client):
        expected = {
            "storage": StorageClient,
            "search": SearchClient,
            "analytics": AnalyticsClient,
            "cache": CacheClient,
            "auth": AuthClient,
            "email": EmailClient,
            "queue": QueueClient,
            "workflow": WorkflowClient,
            "ai": AIClient,
        }
        for name, cls in expected.items():
            assert isinstance(getattr(client, name), cls)


class TestContextSwitching:
    """set_auth and context setters."""

    def test_set_project_and_clear(self, server, client):
        client.set_project("p2")
        client.health()
        assert server.last.headers["x-project-id"] == "p2"
        client.set_project(None)
        client.health()
        assert "x-project-id" not in server.last.headers

    def test_set_organization_and_app(self, server, client):
        client.set_organization("o2")
        client.set_app("a2")
        client.health()
        assert server.last.headers["x-organization-id"] == "o2"
        assert server.last.headers["x-app-id"] == "a2"

    def test_set_auth_with_user_token(self, server, client):
        client.set_auth("Bearer user-token")
        client.health()
        assert server.last.headers["authorization"] == "Bearer user-token"
        assert "x-api-key" not in server.last.headers


class TestQueries:
    """Builder entry points and direct query endpoints."""

    def test_query_returns_fresh_builder(self, client):
        first = client.query()
        assert isinstance(first, QueryBuilder)
        assert client.query() is not first

    def test_from_runs_through_transport(self, server, client):
        server.queue(json={"rows": [{"id": 1}], "rowCount": 1})
        assert client.from_("users").where("id", 1).first() == {"id": 1}
        assert server.path() == "/query/execute"
        assert server.body()["table"] == "users"

    def test_raw(self, server, client):
        server.queue(json={"success": True, "data": {"rows": [{"n": 1}], "rowCount": 1}})
        result = client.raw("SELECT 1 AS n WHERE ? = ?", [1, 1])
        assert result.data == [{"n": 1}]
        assert result.count == 1
        assert server.path() == "/query"
        assert server.body() == {"sql": "SELECT 1 AS n WHERE ? = ?", "params": [1, 1]}

    def test_natural(self, server, client):
        client.natural("how many users signed up today?")
        assert server.path() == "/query/natural"
        assert server.body() == {"query": "how many users signed up today?"}

    @pytest.mark.parametrize("operation", ["raw", "natural"])
    def test_rejected_query_raises(self, server, client, operation):
        server.queue(json={"success": False, "message": "syntax error"})
        with pytest.raises(ServiceError) as exc:
            getattr(client, operation)("SELECT")
        assert exc.value.message == "syntax error"

    def test_health(self, server, client):
        server.queue(json={"status": "ok", "version": "1.2.0"})
        assert client.health() == {"status": "ok", "version": "1.2.0"}
        assert server.last.method == "GET"


class TestLifecycle:
    """close flushes analytics before closing the transport."""

    def test_close_flushes_pending_events(self, server, test_settings):
        with FluxezClient("service_x", base_url=BASE_URL, transport=server.transport, settings=test_settings) as client:
            client.analytics.track("opened")
            assert server.requests == []
        assert server.path() == "/analytics/track"
        assert client.http._client.is_closed

    def test_close_closes_transport_even_if_flush_fails(self, server, test_settings):
        client = FluxezClient(
            "service_x", base_url=BASE_URL, max_retries=0, transport=server.transport, settings=test_settings
        )
        client.analytics.track("opened")
        server.queue(503)
        with pytest.raises(ServerError):
            client.close()
        assert client.http._client.is_closed
        assert client.analytics.pending == 1

    def test_settings_fallbacks(self, server, test_settings):
        test_settings.FLUXEZ_TIMEOUT = 5.0
        test_settings.FLUXEZ_MAX_RETRIES = 1
        with patch("fluxez.client.HttpClient") as http_cls:
            FluxezClient("service_x", settings=test_settings)
        kwargs = http_cls.call_args.kwargs
        assert kwargs["timeout"] == 5.0
        assert kwargs["max_retries"] == 1
        assert kwargs["base_url"] == test_settings.FLUXEZ_BASE_URL
