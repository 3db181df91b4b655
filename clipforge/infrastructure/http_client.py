"""Pooled HTTP client shared by provider clients and the proxy client.

Provider lookups are interactive, so the timeout is short and applies to
the whole request. Timeouts and network errors are not handled here: they
surface as ``httpx.HTTPError`` and each caller classifies them.
"""

import httpx

from clipforge.core.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "ClipForge/0.1"


class HTTPClient:
    """One ``httpx.AsyncClient`` for the lifetime of the application.

    Built by the infrastructure container with the configured provider
    timeout and closed in the application lifespan.

    Example:
        >>> http_client = HTTPClient(timeout=10.0)
        >>> response = await http_client.request("GET", "https://api.fish.audio/model/abc")
        >>> await http_client.close()
    """

    def __init__(
        self,
        timeout: float = 10.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Seconds allowed per provider or proxy request
            max_connections: Maximum number of connections
            max_keepalive_connections: Maximum keepalive connections
        """
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive_connections,
            ),
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )
        logger.info("HTTP client initialized", timeout=timeout, max_connections=max_connections)

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a provider request (GET for catalogs, POST for task APIs)."""
        return await self._client.request(method, url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        """Send a POST request; used for proxy calls."""
        return await self._client.post(url, **kwargs)

    async def close(self) -> None:
        """Close the pool on shutdown."""
        await self._client.aclose()
        logger.info("HTTP client closed")


__all__ = ["HTTPClient", "USER_AGENT"]
