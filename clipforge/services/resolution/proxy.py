"""Client for the provider proxy (primary resolution path).

The proxy answers ``{success, data?, error?, details?}``. Network failures
and timeouts are not raised: they come back as a synthetic response with
status 0 so that the caller always proceeds to its fallback the same way.
"""

from typing import Any

import httpx
from pydantic import BaseModel

from clipforge.core.exceptions import (
    NotFound,
    ProviderError,
    ProviderUnavailable,
    RateLimited,
    TransportFailure,
    Unauthorized,
    UnknownProviderError,
)
from clipforge.core.logging import get_logger
from clipforge.infrastructure.http_client import HTTPClient

logger = get_logger(__name__)

TRANSPORT_FAILURE_STATUS = 0


class ProxyResponse(BaseModel):
    """Outcome of one proxy call."""

    status_code: int
    success: bool = False
    data: Any = None
    error: str | None = None
    details: Any = None

    @property
    def ok(self) -> bool:
        """2xx status and an explicit success flag."""
        return 200 <= self.status_code < 300 and self.success

    def to_error(self, provider: str) -> ProviderError:
        """Classify a failed proxy response.

        Args:
            provider: Provider identifier for error context

        Returns:
            The matching provider error (not raised)
        """
        context = {"proxy_error": self.error, "proxy_details": self.details}
        status = self.status_code
        if status == TRANSPORT_FAILURE_STATUS:
            return TransportFailure(provider, self.error or "proxy unreachable", context=context)
        if status in (401, 403):
            return Unauthorized(provider, status_code=status, context=context)
        if status == 404:
            return NotFound(provider, context=context)
        if status == 429:
            return RateLimited(provider, context=context)
        if status >= 500:
            return ProviderUnavailable(provider, status_code=status, context=context)
        return UnknownProviderError(provider, status, self.error, context=context)


class ProxyClient:
    """Calls ``{base_url}/{provider_slug}/{operation}`` on the proxy.

    Example:
        >>> proxy = ProxyClient(http_client, "https://api.example.com/proxy", token)
        >>> response = await proxy.call("elevenlabs", "detail", {"native_id": "abc"})
        >>> if response.ok:
        ...     payload = response.data
    """

    def __init__(self, http_client: HTTPClient, base_url: str, auth_token: str = "") -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._auth_token = auth_token

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return headers

    async def call(
        self, provider_slug: str, operation: str, payload: dict[str, Any]
    ) -> ProxyResponse:
        """POST a request to the proxy.

        Args:
            provider_slug: Provider route segment (e.g. "fish-audio")
            operation: "detail", "list" or "credits"
            payload: JSON body

        Returns:
            ProxyResponse, with status 0 on network failure or timeout
        """
        url = f"{self._base_url}/{provider_slug}/{operation}"
        try:
            response = await self._http.post(url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            if isinstance(e, httpx.TimeoutException):
                reason = "timeout"
            else:
                reason = str(e) or type(e).__name__
            logger.warning("Proxy unreachable", url=url, error=reason)
            return ProxyResponse(status_code=TRANSPORT_FAILURE_STATUS, error=reason)

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        return ProxyResponse(
            status_code=response.status_code,
            success=bool(body.get("success")),
            data=body.get("data"),
            error=body.get("error"),
            details=body.get("details"),
        )


__all__ = [
    "TRANSPORT_FAILURE_STATUS",
    "ProxyClient",
    "ProxyResponse",
]
