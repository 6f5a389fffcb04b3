"""
Main entry point for the Fluxez client.

`FluxezClient` owns one `HttpClient` and exposes the query builder plus one
wrapper per backend service (storage, search, analytics, cache, auth, email,
queue, workflow, ai). Every argument left unset falls back to `FluxezSettings`.
"""

from typing import Any, Dict, Mapping, Optional, Sequence

import httpx

from .constants import API_ENDPOINTS
from .exceptions import MissingConfigError, ServiceError
from .http import HttpClient
from .logger import Logger
from .querydsl.builder import QueryBuilder
from .schema import QueryResult
from .services import (
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
from .settings import FluxezSettings
from .settings import settings as api_settings
from .utils import envelope_error

_KEY_PREFIXES = ("service_", "anon_", "cgx_")

_CONTEXT_HEADERS = {
    "organization": "x-organization-id",
    "project": "x-project-id",
    "app": "x-app-id",
}


class FluxezClient:
    """High-level client for the Fluxez backend.

    Example:
        >>> with FluxezClient("service_abc") as client:
        ...     rows = client.from_("users").where("active", True).limit(10).get()

    Attributes:
        http: Shared transport used by the builder and every service
        storage, search, analytics, cache, auth, email, queue, workflow, ai:
            Service wrappers bound to `http`
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        headers: Optional[Mapping[str, str]] = None,
        organization_id: Optional[str] = None,
        project_id: Optional[str] = None,
        app_id: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        settings: Optional[FluxezSettings] = None,
    ) -> None:
        """Create the transport and the service wrappers.

        Raises:
            MissingConfigError: If no API key is given and `FLUXEZ_API_KEY` is unset
        """
        self.settings = settings or api_settings
        self.logger = Logger(self.__class__.__name__)

        api_key = api_key or self.settings.FLUXEZ_API_KEY
        if not api_key:
            raise MissingConfigError(
                "API key is required. Get your API key from the Fluxez dashboard.",
                config_key="FLUXEZ_API_KEY",
            )
        if not api_key.startswith(_KEY_PREFIXES) and not api_key.startswith("Bearer "):
            self.logger.warning('API key should start with "service_", "anon_" or "cgx_"')

        self.http = HttpClient(
            api_key,
            base_url=base_url or self.settings.FLUXEZ_BASE_URL,
            timeout=timeout if timeout is not None else self.settings.FLUXEZ_TIMEOUT,
            max_retries=max_retries if max_retries is not None else self.settings.FLUXEZ_MAX_RETRIES,
            retry_delay=retry_delay if retry_delay is not None else self.settings.FLUXEZ_RETRY_DELAY,
            max_retry_delay=self.settings.FLUXEZ_MAX_RETRY_DELAY,
            headers=headers,
            transport=transport,
        )

        self._set_context("organization", organization_id or self.settings.FLUXEZ_ORGANIZATION_ID)
        self._set_context("project", project_id or self.settings.FLUXEZ_PROJECT_ID)
        self._set_context("app", app_id or self.settings.FLUXEZ_APP_ID)

        service_args = (self.http, self.settings)
        self.storage = StorageClient(*service_args)
        self.search = SearchClient(*service_args)
        self.analytics = AnalyticsClient(*service_args)
        self.cache = CacheClient(*service_args)
        self.auth = AuthClient(*service_args)
        self.email = EmailClient(*service_args)
        self.queue = QueueClient(*service_args)
        self.workflow = WorkflowClient(*service_args)
        self.ai = AIClient(*service_args)

        self.logger.message("FluxezClient initialized: base_url=%s", self.http.base_url)

    # ------------- lifecycle -------------

    def close(self) -> None:
        """Flush queued analytics events, then close the transport."""
        try:
            self.analytics.flush()
        finally:
            self.http.close()

    def __enter__(self) -> "FluxezClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------- context headers -------------

    def _set_context(self, kind: str, value: Optional[str]) -> None:
        header = _CONTEXT_HEADERS[kind]
        if value:
            self.http.set_header(header, value)
        else:
            self.http.remove_header(header)

    def set_auth(self, api_key: str) -> None:
        """Switch the API key (or `Bearer ...` token) for subsequent requests."""
        self.http.set_api_key(api_key)

    def set_organization(self, organization_id: Optional[str]) -> None:
        self._set_context("organization", organization_id)

    def set_project(self, project_id: Optional[str]) -> None:
        self._set_context("project", project_id)

    def set_app(self, app_id: Optional[str]) -> None:
        self._set_context("app", app_id)

    def set_header(self, name: str, value: str) -> None:
        self.http.set_header(name, value)

    def remove_header(self, name: str) -> None:
        self.http.remove_header(name)

    # ------------- queries -------------

    def query(self) -> QueryBuilder:
        """Return a fresh builder bound to this client's transport."""
        return QueryBuilder(http=self.http)

    def from_(self, table: str) -> QueryBuilder:
        return self.query().from_(table)

    table = from_

    def raw(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        """Run a raw SQL statement with positional parameters."""
        body = self.http.post(API_ENDPOINTS["QUERY"], json={"sql": sql, "params": list(params or [])})
        return self._query_result(body, "raw")

    def natural(self, query: str, context: Optional[str] = None) -> QueryResult:
        """Run a natural-language query."""
        payload: Dict[str, Any] = {"query": query}
        if context is not None:
            payload["context"] = context
        body = self.http.post(API_ENDPOINTS["NATURAL_QUERY"], json=payload)
        return self._query_result(body, "natural")

    def _query_result(self, body: Any, operation: str) -> QueryResult:
        message = envelope_error(body, default=f"{operation} query failed")
        if message is not None:
            self.logger.warning("%s query rejected: %s", operation, message)
            raise ServiceError(message, operation=operation)
        return QueryResult.from_response(body)

    def health(self) -> Dict[str, Any]:
        """Return the server's health report, e.g. `{"status": "ok", "version": ...}`."""
        return self.http.get(API_ENDPOINTS["HEALTH"]) or {}
