"""HTTP transport for the Fluxez API.

`HttpClient` wraps a single `httpx.Client` and adds:
- API key authentication headers
- Retries with exponential backoff for network errors, 5xx, 408 and 429
  (honoring `Retry-After`)
- Mapping of non-2xx responses onto the `ApiError` hierarchy
"""

import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Mapping, Optional

import httpx

from .constants import FLUXEZ_BASE_URL, RETRYABLE_STATUSES, USER_AGENT
from .exceptions import (
    NetworkError,
    RateLimitError,
    TimeoutError as RequestTimeoutError,
    code_for_status,
    error_class_for_status,
)
from .logger import Logger
from .types import JSON

__all__ = ("HttpClient", "auth_headers", "parse_retry_after")


def auth_headers(api_key: str) -> Dict[str, str]:
    """Return the authentication header for an API key.

    - `Bearer ...` values are sent as `Authorization` unchanged
    - `cgx_` keys are sent as `Authorization: Bearer <key>`
    - anything else (`service_`, `anon_`, ...) goes in `x-api-key`
    """
    if api_key.startswith("Bearer "):
        return {"Authorization": api_key}
    if api_key.startswith("cgx_"):
        return {"Authorization": f"Bearer {api_key}"}
    return {"x-api-key": api_key}


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a `Retry-After` header given in seconds or as an HTTP date."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def _is_retryable(status: int) -> bool:
    return status in RETRYABLE_STATUSES or 500 <= status <= 599


def _decode(response: httpx.Response) -> JSON:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpClient:
    """Synchronous JSON transport with retry and error mapping.

    Args:
        api_key: Fluxez API key (`service_`, `anon_`, `cgx_` or `Bearer ...`)
        base_url: API root, e.g. `https://api-dev.fluxez.com/api/v1`
        timeout: Per-request timeout in seconds
        max_retries: Retries after the first attempt for retryable failures
        retry_delay: Base delay in seconds; doubles on every retry
        max_retry_delay: Upper bound for any single delay
        headers: Extra default headers
        transport: Optional httpx transport (e.g. `httpx.MockTransport` in tests)
        logger: Logger used for request/retry debug output
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = FLUXEZ_BASE_URL,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        max_retry_delay: float = 30.0,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(0, int(max_retries))
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self._logger = logger or Logger(__name__)

        default_headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        default_headers.update(auth_headers(api_key))
        if headers:
            default_headers.update(headers)

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=default_headers,
            transport=transport,
        )

    # ------------- lifecycle -------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------- headers -------------

    @property
    def headers(self) -> httpx.Headers:
        return self._client.headers

    def set_header(self, name: str, value: str) -> None:
        self._client.headers[name] = value

    def remove_header(self, name: str) -> None:
        self._client.headers.pop(name, None)

    def set_api_key(self, api_key: str) -> None:
        """Replace the authentication header for subsequent requests."""
        for name in ("Authorization", "x-api-key"):
            self.remove_header(name)
        for name, value in auth_headers(api_key).items():
            self.set_header(name, value)

    # ------------- request core -------------

    def _backoff(self, attempt: int, retry_after: Optional[float] = None) -> float:
        if retry_after is not None:
            return min(retry_after, self.max_retry_delay)
        return min(self.retry_delay * (2 ** (attempt - 1)), self.max_retry_delay)

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        body = _decode(response)

        message = f"HTTP {status}"
        code = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                code = error.get("code")
                error = error.get("message")
            detail = body.get("message") or error or body.get("detail")
            if detail:
                message = str(detail)
            code = body.get("code") or code
        elif isinstance(body, str) and body:
            message = body

        error_class = error_class_for_status(status)
        if error_class is RateLimitError:
            raise RateLimitError(
                message,
                code=code,
                body=body,
                retry_after=parse_retry_after(response.headers.get("Retry-After")),
            )
        raise error_class(message, status_code=status, code=code or code_for_status(status), body=body)

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one logical request, retrying retryable failures."""
        method = method.upper()
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._client.request(method, path, **kwargs)
            except httpx.TimeoutException as e:
                if attempt > self.max_retries:
                    self._logger.error("%s %s timed out after %d attempt(s)", method, path, attempt)
                    raise RequestTimeoutError("Request timed out", url=path, timeout=self.timeout) from e
                delay = self._backoff(attempt)
                self._logger.debug("%s %s timed out; retry %d in %.2fs", method, path, attempt, delay)
            except httpx.TransportError as e:
                if attempt > self.max_retries:
                    self._logger.error("%s %s failed after %d attempt(s): %s", method, path, attempt, e)
                    raise NetworkError("Network error - no response received", url=path, reason=str(e)) from e
                delay = self._backoff(attempt)
                self._logger.debug("%s %s failed (%s); retry %d in %.2fs", method, path, e, attempt, delay)
            else:
                self._logger.debug("%s %s -> %s", method, path, response.status_code)
                if response.is_success:
                    return response
                if not _is_retryable(response.status_code) or attempt > self.max_retries:
                    self._logger.warning("%s %s failed with status %s", method, path, response.status_code)
                    self._raise_for_status(response)
                delay = self._backoff(attempt, parse_retry_after(response.headers.get("Retry-After")))
                self._logger.debug(
                    "%s %s returned %s; retry %d in %.2fs", method, path, response.status_code, attempt, delay
                )
            time.sleep(delay)

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        files: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> JSON:
        """Send a request and return the decoded body (None when empty)."""
        kwargs: Dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if data is not None:
            kwargs["data"] = data
        if files is not None:
            kwargs["files"] = files
        if headers:
            kwargs["headers"] = headers
        return _decode(self._send(method, path, **kwargs))

    def request_raw(self, method: str, path: str, *, params: Optional[Mapping[str, Any]] = None) -> bytes:
        """Send a request and return the raw response bytes."""
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        return self._send(method, path, **kwargs).content

    # ------------- convenience -------------

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> JSON:
        return self.request("GET", path, params=params, **kwargs)

    def post(self, path: str, json: Any = None, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> JSON:
        return self.request("POST", path, json=json, params=params, **kwargs)

    def put(self, path: str, json: Any = None, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> JSON:
        return self.request("PUT", path, json=json, params=params, **kwargs)

    def patch(self, path: str, json: Any = None, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> JSON:
        return self.request("PATCH", path, json=json, params=params, **kwargs)

    def delete(self, path: str, json: Any = None, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> JSON:
        return self.request("DELETE", path, json=json, params=params, **kwargs)
