"""Unit tests for HTTP client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from clipforge.infrastructure.http_client import USER_AGENT, HTTPClient


@pytest.mark.unit
class TestHTTPClientInit:
    """Tests for HTTPClient initialization."""

    @patch("clipforge.infrastructure.http_client.httpx.AsyncClient")
    def test_init_default_values(self, mock_async_client):
        """Test initialization with default values."""
        client = HTTPClient()

        mock_async_client.assert_called_once()
        call_kwargs = mock_async_client.call_args[1]
        assert call_kwargs["follow_redirects"] is True
        assert call_kwargs["headers"] == {"User-Agent": USER_AGENT}
        assert client.timeout == 10.0

    @patch("clipforge.infrastructure.http_client.httpx.AsyncClient")
    def test_init_custom_timeout(self, mock_async_client):
        """Test initialization with custom timeout."""
        client = HTTPClient(timeout=2.5)

        assert client.timeout == 2.5
        timeout = mock_async_client.call_args[1]["timeout"]
        assert timeout.connect == 2.5


@pytest.mark.unit
class TestHTTPClientRequests:
    """Tests for HTTPClient request methods."""

    @pytest.fixture
    def mock_client(self):
        """Create HTTPClient with mocked internal client."""
        with patch("clipforge.infrastructure.http_client.httpx.AsyncClient") as mock:
            mock_instance = MagicMock()
            mock_instance.request = AsyncMock()
            mock_instance.post = AsyncMock()
            mock_instance.aclose = AsyncMock()
            mock.return_value = mock_instance

            client = HTTPClient()
            yield client, mock_instance

    @pytest.mark.asyncio
    async def test_request_forwards_method(self, mock_client):
        """Test generic request passes method and kwargs through."""
        client, mock_instance = mock_client

        await client.request("GET", "https://example.com", params={"a": 1})

        mock_instance.request.assert_called_once_with(
            "GET", "https://example.com", params={"a": 1}
        )

    @pytest.mark.asyncio
    async def test_post_with_json(self, mock_client):
        """Test POST request with JSON body."""
        client, mock_instance = mock_client

        await client.post("https://example.com", json={"key": "value"})

        mock_instance.post.assert_called_once_with("https://example.com", json={"key": "value"})

    @pytest.mark.asyncio
    async def test_close(self, mock_client):
        """Test close releases the underlying client."""
        client, mock_instance = mock_client

        await client.close()

        mock_instance.aclose.assert_called_once()
