"""Shared base for the service wrappers."""

from typing import Any, Optional, Type

from ..exceptions import ServiceError
from ..http import HttpClient
from ..logger import Logger
from ..settings import FluxezSettings
from ..settings import settings as api_settings
from ..utils import envelope_error

__all__ = ("ServiceClient",)


class ServiceClient:
    """Base class for endpoint families (storage, search, cache, ...).

    Subclasses set `error_class` to the `ServiceError` subclass raised when a
    response envelope reports `success: false`.
    """

    error_class: Type[ServiceError] = ServiceError

    def __init__(
        self,
        http: HttpClient,
        settings: Optional[FluxezSettings] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self._http = http
        self.settings = settings or api_settings
        self.logger = logger or Logger(self.__class__.__module__)

    def _unwrap(self, body: Any, operation: str) -> Any:
        """Return the payload of a `{success, data, message}` envelope.

        Bodies without an envelope are returned unchanged.

        Raises:
            ServiceError: (subclass per service) when `success` is false
        """
        message = envelope_error(body, default=f"{operation} failed")
        if message is not None:
            self.logger.warning("%s rejected: %s", operation, message)
            raise self.error_class(message, operation=operation)
        if isinstance(body, dict) and "success" in body and "data" in body:
            return body["data"]
        return body
