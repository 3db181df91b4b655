"""Asset resolution with a primary proxy path and a direct fallback path.

The proxy may be unreachable or fail on its own, independently of the
provider. Any primary failure (non-2xx status, ``success: false``, a
synthetic transport failure or a payload the normalizer rejects) triggers
exactly one direct provider call with a credential from the resolution
chain. Both paths hand raw provider payloads to the same normalizer, so
callers cannot tell which path produced a result.
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from clipforge.core.exceptions import (
    CredentialNotFound,
    ProviderError,
    ResolutionError,
    UnknownProviderError,
    UnsupportedOperation,
)
from clipforge.core.logging import get_logger
from clipforge.services.providers.base import (
    AssetPage,
    ListOptions,
    ProviderAsset,
    ProviderClient,
    ProviderCredits,
    ProviderName,
    RawPage,
)
from clipforge.services.providers.registry import ProviderRegistry
from clipforge.services.resolution.credentials import DEMO_CREDENTIAL, CredentialResolver
from clipforge.services.resolution.proxy import ProxyClient

logger = get_logger(__name__)

ResultT = TypeVar("ResultT")


class ResolutionService:
    """Resolve provider assets through proxy first, provider second.

    Example:
        >>> service = ResolutionService(registry, resolver, proxy)
        >>> voice = await service.resolve_asset("ElevenLabs", "21m00Tcm4TlvDq8ikWAM")
        >>> voice.provider
        <ProviderName.ELEVENLABS: 'ElevenLabs'>
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        credential_resolver: CredentialResolver,
        proxy_client: ProxyClient,
    ) -> None:
        self._registry = registry
        self._credentials = credential_resolver
        self._proxy = proxy_client

    def client_for(self, provider: ProviderName | str) -> ProviderClient:
        """Registry lookup, raising ValueError for unsupported providers."""
        return self._registry.get(provider)

    def is_cacheable(self, provider: ProviderName | str) -> bool:
        """Whether assets of this provider may be cached with their preview URL."""
        return self._registry.get(provider).cacheable

    async def _fallback_credential(self, client: ProviderClient, supplied: str | None) -> str:
        try:
            return await self._credentials.resolve(client.provider, supplied)
        except CredentialNotFound:
            if not client.supports_demo:
                raise
            logger.warning("Falling back to demo credential", provider=client.provider.value)
            return DEMO_CREDENTIAL

    async def _two_path(
        self,
        client: ProviderClient,
        operation: str,
        payload: dict[str, Any],
        supplied: str | None,
        accept: Callable[[Any], ResultT],
        direct: Callable[[str], Awaitable[ResultT]],
    ) -> ResultT:
        provider = client.provider.value
        primary = await self._proxy.call(client.provider.slug, operation, payload)

        primary_error: ProviderError
        if primary.ok:
            try:
                return accept(primary.data)
            except ProviderError as e:
                primary_error = e
            except (TypeError, ValueError) as e:
                primary_error = UnknownProviderError(provider, primary.status_code, str(e))
        else:
            primary_error = primary.to_error(provider)

        logger.warning(
            "Primary path failed, calling provider directly",
            provider=provider,
            operation=operation,
            status=primary.status_code,
            error=str(primary_error),
        )

        try:
            credential = await self._fallback_credential(client, supplied)
            return await direct(credential)
        except ProviderError as e:
            logger.error(
                "Fallback path failed",
                provider=provider,
                operation=operation,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise ResolutionError(provider, primary=primary_error, fallback=e) from e

    async def resolve_asset(
        self,
        provider: ProviderName | str,
        native_id: str,
        supplied_credential: str | None = None,
    ) -> ProviderAsset:
        """Resolve one asset into its normalized form.

        Args:
            provider: Provider identifier
            native_id: Provider-native asset id
            supplied_credential: Optional caller credential, passed through to
                the proxy and preferred on the fallback path

        Returns:
            Normalized asset whose provider equals the requested provider

        Raises:
            ValueError: If provider is not supported
            ResolutionError: If both paths failed
        """
        client = self._registry.get(provider)
        payload: dict[str, Any] = {"native_id": native_id}
        if supplied_credential:
            payload["credential"] = supplied_credential

        return await self._two_path(
            client,
            "detail",
            payload,
            supplied_credential,
            accept=client.normalize,
            direct=lambda credential: client.fetch_detail(native_id, credential),
        )

    async def list_assets(
        self,
        provider: ProviderName | str,
        options: ListOptions | None = None,
        supplied_credential: str | None = None,
    ) -> AssetPage:
        """List one page of a provider catalog with the same two-path strategy.

        Raises:
            ValueError: If provider is not supported
            ResolutionError: If both paths failed
        """
        client = self._registry.get(provider)
        options = options or ListOptions()
        payload: dict[str, Any] = options.model_dump()
        if supplied_credential:
            payload["credential"] = supplied_credential

        return await self._two_path(
            client,
            "list",
            payload,
            supplied_credential,
            accept=lambda data: RawPage.model_validate(data).normalized(client.normalize),
            direct=lambda credential: client.list_assets(credential, options),
        )

    async def resolve_preview_url(
        self,
        provider: ProviderName | str,
        native_id: str,
        supplied_credential: str | None = None,
    ) -> str:
        """Resolve a fresh preview URL.

        Always goes to the provider, never to a cache, because some providers
        hand out URLs that expire.

        Returns:
            Preview URL, empty when the asset has none

        Raises:
            UnsupportedOperation: If the provider offers no previews
            ResolutionError: If both paths failed
        """
        client = self._registry.get(provider)
        if not client.supports_preview:
            raise UnsupportedOperation(client.provider.value, "preview playback")
        asset = await self.resolve_asset(client.provider, native_id, supplied_credential)
        return asset.preview_url

    async def fetch_credits(
        self,
        provider: ProviderName | str,
        supplied_credential: str | None = None,
    ) -> ProviderCredits:
        """Look up the remaining account balance on a provider.

        Raises:
            UnsupportedOperation: If the provider reports no balance
            ResolutionError: If both paths failed
        """
        client = self._registry.get(provider)
        if not client.supports_credits:
            raise UnsupportedOperation(client.provider.value, "credit lookup")
        payload: dict[str, Any] = {}
        if supplied_credential:
            payload["credential"] = supplied_credential

        return await self._two_path(
            client,
            "credits",
            payload,
            supplied_credential,
            accept=client.normalize_credits,
            direct=client.fetch_credits,
        )


__all__ = ["ResolutionService"]
