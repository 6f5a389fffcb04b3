"""Custom exceptions for the Fluxez client.

Usage errors are raised synchronously where a call is made and never reach the wire.
Transport and API errors come from the HTTP layer and propagate to the caller
unchanged. Service errors report an unsuccessful response envelope.
"""

from typing import Any, Dict, Optional


# Base exception
class FluxezError(Exception):
    """Base exception for all Fluxez errors.

    Attributes:
        message: Error message
        details: Additional error context as key-value pairs
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        """Initialize exception with message and additional details.

        Args:
            message: Human-readable error message
            **kwargs: Additional context (e.g., column, operator, path)
        """
        self.message = message
        self.details: Dict[str, Any] = kwargs
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message with details."""
        if not self.details:
            return self.message

        details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        if self.message:
            return f"{self.message} ({details_str})"
        return details_str

    def __repr__(self) -> str:
        """Return detailed representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# Usage exceptions
class UsageError(FluxezError):
    """Raised when the library is called incorrectly.

    Example:
        >>> raise UsageError("Callback must be callable", argument="callback")
    """


class QueryError(UsageError):
    """Base exception for malformed query builder chains.

    Example:
        >>> raise QueryError("Table not set", operation="to_query")
    """


class InvalidOperatorError(QueryError):
    """Raised when a condition or join uses an unsupported operator.

    Example:
        >>> raise InvalidOperatorError("Unsupported operator", operator="~~", column="name")
    """


class InvalidValueError(QueryError):
    """Raised when a value cannot be represented on the wire or does not fit its operator.

    Example:
        >>> raise InvalidValueError("between expects a pair", column="age", value=[1])
    """


class InvalidPaginationError(QueryError):
    """Raised for negative limits/offsets and for page or per-page values below one.

    Example:
        >>> raise InvalidPaginationError("page must be >= 1", page=0)
    """


class QueryStateError(QueryError):
    """Raised when a call conflicts with the builder's query type.

    Example:
        >>> raise QueryStateError("Query type already set", current="insert", requested="update")
    """


# Configuration exceptions
class ConfigurationError(UsageError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("Invalid configuration", setting="timeout", value=-1)
    """


class MissingConfigError(ConfigurationError):
    """Raised when required configuration values are not set.

    Example:
        >>> raise MissingConfigError("API key not configured", config_key="FLUXEZ_API_KEY")
    """


# Transport exceptions
class TransportError(FluxezError):
    """Base exception for failures where no HTTP response was received."""

    status_code = 0


class NetworkError(TransportError):
    """Raised when the server cannot be reached.

    Example:
        >>> raise NetworkError("Network error - no response received", url="/query/execute")
    """


class TimeoutError(TransportError):
    """Raised when a request exceeds the configured timeout.

    Example:
        >>> raise TimeoutError("Request timed out", timeout=30.0)
    """


# API exceptions
_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "UNPROCESSABLE_ENTITY",
    429: "TOO_MANY_REQUESTS",
    500: "INTERNAL_SERVER_ERROR",
    501: "NOT_IMPLEMENTED",
    502: "BAD_GATEWAY",
    503: "SERVICE_UNAVAILABLE",
    504: "GATEWAY_TIMEOUT",
}


def code_for_status(status_code: int) -> str:
    """Return the symbolic error code for an HTTP status."""
    return _STATUS_CODES.get(status_code, f"HTTP_{status_code}")


class ApiError(FluxezError):
    """Raised when the server answers with a non-2xx status.

    Attributes:
        status_code: HTTP status code of the response
        code: Error code from the response body, or one derived from the status
        body: Decoded response body, if any
    """

    def __init__(
        self,
        message: str = "",
        status_code: int = 500,
        code: Optional[str] = None,
        body: Any = None,
        **kwargs: Any,
    ) -> None:
        self.status_code = status_code
        self.code = code or code_for_status(status_code)
        self.body = body
        super().__init__(message, status_code=status_code, code=self.code, **kwargs)


class BadRequestError(ApiError):
    """Raised for 400 and 422 responses."""


class AuthenticationError(ApiError):
    """Raised for 401 responses (invalid or missing API key)."""


class PermissionDeniedError(ApiError):
    """Raised for 403 responses."""


class NotFoundError(ApiError):
    """Raised for 404 responses."""


class ConflictError(ApiError):
    """Raised for 409 responses."""


class RateLimitError(ApiError):
    """Raised for 429 responses.

    Attributes:
        retry_after: Seconds the server asked the client to wait, if provided
    """

    def __init__(self, message: str = "", retry_after: Optional[float] = None, **kwargs: Any) -> None:
        self.retry_after = retry_after
        kwargs.setdefault("status_code", 429)
        super().__init__(message, **kwargs)


class ServerError(ApiError):
    """Raised for 5xx responses."""


_STATUS_ERRORS = {
    400: BadRequestError,
    401: AuthenticationError,
    403: PermissionDeniedError,
    404: NotFoundError,
    409: ConflictError,
    422: BadRequestError,
    429: RateLimitError,
}


def error_class_for_status(status_code: int) -> type:
    """Return the `ApiError` subclass matching an HTTP status."""
    if status_code >= 500:
        return ServerError
    return _STATUS_ERRORS.get(status_code, ApiError)


# Service exceptions
class ServiceError(FluxezError):
    """Raised when a service answers 2xx but reports `success: false` in its envelope."""


class StorageError(ServiceError):
    """Raised when a storage operation is rejected.

    Example:
        >>> raise StorageError("Upload failed", path="images/logo.png")
    """


class EmailError(ServiceError):
    """Raised when an email operation is rejected."""


class QueueError(ServiceError):
    """Raised when a queue operation is rejected."""


class WorkflowError(ServiceError):
    """Raised when a workflow operation is rejected."""


class AIError(ServiceError):
    """Raised when an AI operation is rejected."""
