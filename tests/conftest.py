"""
Shared test configuration and fixtures for the Zion SDK tests.

Provides isolated settings, aiohttp session/response mocks and account id helpers
used across the resolver and Horizon test files.
"""

from typing import Dict, Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from aiohttp import ClientResponse, ClientSession
from multidict import CIMultiDict, CIMultiDictProxy
from yarl import URL

from org.zion.sdk.config import Settings, reset_default_settings
from org.zion.sdk.http import HttpResponse
from org.zion.sdk.strkey import encode_account_id

ZERO_ACCOUNT_ID = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"


def generate_account_id(seed: int = 1) -> str:
    """Generate a valid account id from a repeated byte."""
    return encode_account_id(bytes([seed % 256]) * 32)


class AsyncChunks:
    """Async iterator over byte chunks, standing in for StreamReader.iter_chunked."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks: List[bytes] = list(chunks)

    def __aiter__(self) -> "AsyncChunks":
        return self

    async def __anext__(self) -> bytes:
        if len(self._chunks) == 0:
            raise StopAsyncIteration
        return self._chunks.pop(0)


def split_body(body: bytes, size: int) -> List[bytes]:
    return [body[i : i + size] for i in range(0, len(body), size)]


def create_mock_response(
    status: int = 200,
    body: bytes = b"",
    reason: str = "OK",
    headers: Optional[Dict[str, str]] = None,
    declare_length: bool = True,
) -> ClientResponse:
    """Create a mock aiohttp ClientResponse whose body streams in chunks."""
    mock_response = AsyncMock(spec=ClientResponse)
    mock_response.status = status
    mock_response.reason = reason
    mock_response.headers = CIMultiDictProxy(CIMultiDict(headers or {}))
    mock_response.content_length = len(body) if declare_length else None
    mock_response.content = Mock()
    mock_response.content.iter_chunked = Mock(
        side_effect=lambda n: AsyncChunks(split_body(body, n))
    )
    return mock_response


def mock_get_context(mock_response: ClientResponse) -> MagicMock:
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=mock_response)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


def create_mock_session(**kwargs) -> ClientSession:
    """Create a mock session answering every GET with the same response."""
    mock_session = AsyncMock(spec=ClientSession)
    mock_session.get.return_value.__aenter__.return_value = create_mock_response(**kwargs)
    return mock_session


def create_routed_session(routes: Dict[str, ClientResponse]) -> ClientSession:
    """Create a mock session answering GETs by "host/path" of the requested URL."""

    def get(url, **kwargs):
        parsed = URL(str(url))
        key = f"{parsed.host}{parsed.path}"
        if key not in routes:
            return mock_get_context(create_mock_response(status=404, reason="Not Found"))
        return mock_get_context(routes[key])

    mock_session = AsyncMock(spec=ClientSession)
    mock_session.get = Mock(side_effect=get)
    return mock_session


def create_http_response(
    status: int = 200,
    body: bytes = b"",
    reason: str = "OK",
    url: str = "https://example.com/",
    headers: Optional[Dict[str, str]] = None,
) -> HttpResponse:
    return HttpResponse(
        url=URL(url),
        status=status,
        reason=reason,
        headers=CIMultiDictProxy(CIMultiDict(headers or {})),
        body=body,
    )


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep ZION_* variables and cached process defaults out of every test."""
    for name in ("ZION_ALLOW_HTTP", "ZION_TIMEOUT", "ZION_HORIZON_URL", "ZION_SENTRY_DSN"):
        monkeypatch.delenv(name, raising=False)
    reset_default_settings()
    yield
    reset_default_settings()


@pytest.fixture
def settings() -> Settings:
    return Settings(allow_http=False, timeout=0)


@pytest.fixture
def insecure_settings() -> Settings:
    return Settings(allow_http=True, timeout=5)
