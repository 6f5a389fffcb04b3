"""Pytest configuration and fixtures for Fluxez client tests."""

import json
from typing import Any, Dict, List, Optional, Union
from unittest.mock import patch

import httpx
import pytest
from dotenv import load_dotenv

from fluxez.client import FluxezClient
from fluxez.http import HttpClient
from fluxez.settings import FluxezSettings

# Load environment variables
load_dotenv()

BASE_URL = "https://api.fluxez.test/api/v1"
API_KEY = "service_test_key"


# In-memory server behind httpx.MockTransport
class MockServer:
    """Records requests and replays queued responses in order.

    When the queue is empty every request gets `200 {}`. Queued exceptions
    are raised from the transport as if the network failed.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responses: List[Union[httpx.Response, Exception]] = []

    def queue(
        self,
        status: int = 200,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> "MockServer":
        if content is not None:
            self._responses.append(httpx.Response(status, content=content, headers=headers))
        elif json is not None:
            self._responses.append(httpx.Response(status, json=json, headers=headers))
        else:
            self._responses.append(httpx.Response(status, headers=headers))
        return self

    def fail(self, error: Exception) -> "MockServer":
        self._responses.append(error)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(200, json={})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        """Decoded JSON body of a recorded request."""
        return json.loads(self.requests[index].content)

    def path(self, index: int = -1) -> str:
        """Request path relative to the API root."""
        return self.requests[index].url.path[len("/api/v1") :]


@pytest.fixture
def server():
    return MockServer()


@pytest.fixture(autouse=True)
def no_sleep():
    """Skip retry backoff delays; the mock records requested delays."""
    with patch("fluxez.http.time.sleep") as sleep:
        yield sleep


@pytest.fixture
def test_settings():
    """Settings isolated from any local .env file."""
    return FluxezSettings(
        _env_file=None,
        FLUXEZ_API_KEY=None,
        FLUXEZ_ORGANIZATION_ID=None,
        FLUXEZ_PROJECT_ID=None,
        FLUXEZ_APP_ID=None,
        ANALYTICS_BATCH_SIZE=100,
        ANALYTICS_FLUSH_INTERVAL=None,
        CACHE_PREFIX="",
        CACHE_TTL=3600,
    )


@pytest.fixture
def http(server):
    client = HttpClient(API_KEY, base_url=BASE_URL, retry_delay=0.5, transport=server.transport)
    yield client
    client.close()


@pytest.fixture
def client(server, test_settings):
    c = FluxezClient(API_KEY, base_url=BASE_URL, transport=server.transport, settings=test_settings)
    yield c
    c.http.close()
