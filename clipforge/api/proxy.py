"""Server-side provider proxy.

Primary path of asset resolution. Keeps provider credentials server side:
the caller names the provider and the asset, the proxy resolves the stored
credential when none is supplied and returns the raw provider payload
untouched so that both resolution paths share one normalizer. The credits
route follows the same rules for account balances.

Responses are always ``{"success": bool, "data"?, "error"?, "details"?}``.
"""

from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from clipforge.core.config import Config, get_config
from clipforge.core.container import get_container
from clipforge.core.exceptions import (
    CredentialNotFound,
    NotFound,
    ProviderError,
    RateLimited,
    Unauthorized,
    UnsupportedOperation,
)
from clipforge.core.logging import get_logger
from clipforge.services.providers.base import ListOptions, ProviderClient, ProviderName
from clipforge.services.providers.registry import ProviderRegistry
from clipforge.services.resolution.credentials import CredentialResolver

logger = get_logger(__name__)

router = APIRouter(prefix="/proxy", tags=["Proxy"])


# ============================================
# Schemas
# ============================================


class DetailRequest(BaseModel):
    """Body of a detail call."""

    native_id: str = Field(..., min_length=1)
    credential: str | None = None


class ListRequest(ListOptions):
    """Body of a list call."""

    credential: str | None = None


class CreditsRequest(BaseModel):
    """Body of a credits call."""

    credential: str | None = None


# ============================================
# Dependencies
# ============================================


def get_provider_registry() -> ProviderRegistry:
    """FastAPI dependency for the provider registry."""
    return get_container().provider_registry()


def get_credential_resolver() -> CredentialResolver:
    """FastAPI dependency for the credential resolver."""
    return get_container().credential_resolver()


def verify_proxy_token(
    authorization: str | None = Header(default=None),
    config: Config = Depends(get_config),
) -> None:
    """Reject calls without the configured bearer token.

    No token configured means the proxy is open (local development).
    """
    if not config.proxy_auth_token:
        return
    if authorization != f"Bearer {config.proxy_auth_token}":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"success": False, "error": "Invalid proxy token"},
        )


# ============================================
# Helpers
# ============================================


def _status_for(error: ProviderError) -> int:
    if isinstance(error, NotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, Unauthorized):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(error, RateLimited):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(error, CredentialNotFound):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(error, UnsupportedOperation):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_502_BAD_GATEWAY


def _failure(error: ProviderError) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "error": error.user_message}
    if error.context:
        body["details"] = {key: str(value) for key, value in error.context.items()}
    headers = None
    if isinstance(error, RateLimited) and error.retry_after is not None:
        headers = {"Retry-After": str(error.retry_after)}
    return JSONResponse(status_code=_status_for(error), content=body, headers=headers)


def _client_for_slug(registry: ProviderRegistry, slug: str) -> ProviderClient | None:
    try:
        return registry.get(ProviderName.from_slug(slug))
    except ValueError:
        return None


def _unknown_provider(slug: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"success": False, "error": f"Unsupported provider: {slug}"},
    )


# ============================================
# Endpoints
# ============================================


@router.post("/{slug}/detail", dependencies=[Depends(verify_proxy_token)])
async def proxy_detail(
    slug: str,
    request: DetailRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
    resolver: CredentialResolver = Depends(get_credential_resolver),
) -> JSONResponse:
    """Fetch the raw payload of one asset."""
    client = _client_for_slug(registry, slug)
    if client is None:
        return _unknown_provider(slug)

    try:
        credential = await resolver.resolve(client.provider, request.credential)
        data = await client.fetch_raw(request.native_id, credential)
    except ProviderError as e:
        logger.warning(
            "Proxy detail failed",
            provider=client.provider.value,
            native_id=request.native_id,
            error_type=type(e).__name__,
            error=str(e),
        )
        return _failure(e)

    return JSONResponse(content={"success": True, "data": data})


@router.post("/{slug}/list", dependencies=[Depends(verify_proxy_token)])
async def proxy_list(
    slug: str,
    request: ListRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
    resolver: CredentialResolver = Depends(get_credential_resolver),
) -> JSONResponse:
    """Fetch one page of raw payloads."""
    client = _client_for_slug(registry, slug)
    if client is None:
        return _unknown_provider(slug)

    options = ListOptions(**request.model_dump(exclude={"credential"}))
    try:
        credential = await resolver.resolve(client.provider, request.credential)
        page = await client.list_raw(credential, options)
    except ProviderError as e:
        logger.warning(
            "Proxy list failed",
            provider=client.provider.value,
            error_type=type(e).__name__,
            error=str(e),
        )
        return _failure(e)

    return JSONResponse(content={"success": True, "data": page.model_dump(mode="json")})


@router.post("/{slug}/credits", dependencies=[Depends(verify_proxy_token)])
async def proxy_credits(
    slug: str,
    request: CreditsRequest,
    registry: ProviderRegistry = Depends(get_provider_registry),
    resolver: CredentialResolver = Depends(get_credential_resolver),
) -> JSONResponse:
    """Fetch the raw account balance payload."""
    client = _client_for_slug(registry, slug)
    if client is None:
        return _unknown_provider(slug)

    try:
        if not client.supports_credits:
            raise UnsupportedOperation(client.provider.value, "credit lookup")
        credential = await resolver.resolve(client.provider, request.credential)
        data = await client.fetch_credits_raw(credential)
    except ProviderError as e:
        logger.warning(
            "Proxy credits failed",
            provider=client.provider.value,
            error_type=type(e).__name__,
            error=str(e),
        )
        return _failure(e)

    return JSONResponse(content={"success": True, "data": data})


__all__ = [
    "CreditsRequest",
    "DetailRequest",
    "ListRequest",
    "get_credential_resolver",
    "get_provider_registry",
    "router",
    "verify_proxy_token",
]
