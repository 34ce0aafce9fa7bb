"""
Unit tests for the GET transport in org.zion.sdk.http
"""

import asyncio

import pytest
from aiohttp import ClientConnectionError, ClientSession
from unittest.mock import AsyncMock, patch

from org.zion.sdk.http import (
    ResponseTooLarge,
    client_timeout,
    fetch,
)

from conftest import create_http_response, create_mock_session


class TestClientTimeout:
    def test_zero_disables_timeout(self):
        assert client_timeout(0).total is None

    def test_positive_timeout(self):
        assert client_timeout(2.5).total == 2.5


class TestHttpResponse:
    def test_ok_range(self):
        assert create_http_response(status=200).ok is True
        assert create_http_response(status=204).ok is True
        assert create_http_response(status=301).ok is False
        assert create_http_response(status=404).ok is False

    def test_json_and_text(self):
        response = create_http_response(
            body=b'{"a": 1}', headers={"Content-Type": "application/json"}
        )
        assert response.json() == {"a": 1}
        assert response.text() == '{"a": 1}'
        assert response.content_type == "application/json"


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_reads_body(self):
        mock_session = create_mock_session(status=200, body=b"x" * 40000, reason="OK")

        response = await fetch(mock_session, "https://example.com/data", timeout=3)

        assert response.status == 200
        assert response.reason == "OK"
        assert response.body == b"x" * 40000
        assert str(response.url) == "https://example.com/data"
        mock_session.get.assert_called_once()
        args, kwargs = mock_session.get.call_args
        assert args[0] == "https://example.com/data"
        assert kwargs["timeout"].total == 3

    @pytest.mark.asyncio
    async def test_fetch_returns_error_statuses(self):
        """Test non-2xx responses are returned, not raised."""
        mock_session = create_mock_session(status=500, body=b"boom", reason="Server Error")

        response = await fetch(mock_session, "https://example.com/")

        assert response.status == 500
        assert response.body == b"boom"

    @pytest.mark.asyncio
    async def test_fetch_at_limit(self):
        mock_session = create_mock_session(body=b"x" * 1024)
        response = await fetch(mock_session, "https://example.com/", max_size=1024)
        assert len(response.body) == 1024

    @pytest.mark.asyncio
    async def test_fetch_declared_length_over_limit(self):
        mock_session = create_mock_session(body=b"x" * 1025)

        with pytest.raises(ResponseTooLarge) as exc_info:
            await fetch(mock_session, "https://example.com/", max_size=1024)

        assert exc_info.value.limit == 1024

    @pytest.mark.asyncio
    async def test_fetch_streamed_body_over_limit(self):
        """Test the limit holds when the server sends no Content-Length."""
        mock_session = create_mock_session(body=b"x" * 50000, declare_length=False)

        with pytest.raises(ResponseTooLarge):
            await fetch(mock_session, "https://example.com/", max_size=40000)

    @pytest.mark.asyncio
    async def test_fetch_no_limit(self):
        mock_session = create_mock_session(body=b"x" * 300000, declare_length=False)
        response = await fetch(mock_session, "https://example.com/")
        assert len(response.body) == 300000

    @pytest.mark.asyncio
    async def test_fetch_transport_errors_propagate(self):
        mock_session = AsyncMock(spec=ClientSession)
        mock_session.get.side_effect = ClientConnectionError("connection refused")

        with pytest.raises(ClientConnectionError):
            await fetch(mock_session, "https://example.com/")

    @pytest.mark.asyncio
    async def test_fetch_timeout_propagates(self):
        mock_session = AsyncMock(spec=ClientSession)
        mock_session.get.side_effect = asyncio.TimeoutError()

        with pytest.raises(asyncio.TimeoutError):
            await fetch(mock_session, "https://example.com/", timeout=1)

    @pytest.mark.asyncio
    @patch("org.zion.sdk.http.sentry_sdk")
    async def test_fetch_leaves_breadcrumb(self, mock_sentry):
        mock_session = create_mock_session(body=b"{}")

        await fetch(mock_session, "https://example.com/")

        mock_sentry.add_breadcrumb.assert_called_once()
        assert "https://example.com/" in mock_sentry.add_breadcrumb.call_args.kwargs["message"]
