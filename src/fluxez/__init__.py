"""
Fluxez Python client.

Exposes the `FluxezClient` facade, the fluent `QueryBuilder` and the error
hierarchy for easy access.
"""

from .client import FluxezClient
from .exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    FluxezError,
    NetworkError,
    NotFoundError,
    QueryError,
    QueryStateError,
    RateLimitError,
    ServerError,
    ServiceError,
    TimeoutError,
    UsageError,
)
from .http import HttpClient
from .querydsl import QueryBuilder, QueryDescriptor
from .schema import QueryResult
from .settings import FluxezSettings, settings

__version__ = "0.1.0"

__all__ = [
    "FluxezClient",
    "QueryBuilder",
    "QueryDescriptor",
    "QueryResult",
    "HttpClient",
    "FluxezSettings",
    "settings",
    "FluxezError",
    "UsageError",
    "QueryError",
    "QueryStateError",
    "ConfigurationError",
    "NetworkError",
    "TimeoutError",
    "ApiError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "ServerError",
    "ServiceError",
]
