"""Local catalog of provider assets.

Combines the resolution service with the asset cache: fetch-and-save of a
single asset, bulk sync of a provider catalog and search over what has been
cached. Providers that declare their preview URLs non-cacheable are stored
without them.
"""

from clipforge.core.exceptions import DatabaseError
from clipforge.core.logging import get_logger
from clipforge.services.providers.base import ListOptions, ProviderAsset, ProviderName
from clipforge.services.providers.registry import parse_provider
from clipforge.services.resolution.service import ResolutionService
from clipforge.services.store import AssetCacheStore

logger = get_logger(__name__)


class AssetCatalog:
    """Cache-backed view over provider catalogs.

    Example:
        >>> catalog = AssetCatalog(resolution_service, AssetCacheStore(session_factory))
        >>> saved = await catalog.sync_provider("Minimax")
        >>> voices = await catalog.search("english")
    """

    def __init__(self, resolution: ResolutionService, cache: AssetCacheStore) -> None:
        self._resolution = resolution
        self._cache = cache

    def _cacheable_copy(self, asset: ProviderAsset) -> ProviderAsset:
        if self._resolution.is_cacheable(asset.provider):
            return asset
        return asset.without_preview()

    async def fetch_and_save(
        self,
        provider: ProviderName | str,
        native_id: str,
        supplied_credential: str | None = None,
    ) -> ProviderAsset:
        """Resolve an asset, cache it and return the fresh (uncached) value.

        Raises:
            ResolutionError: If the asset could not be resolved
            DatabaseError: If caching failed
        """
        asset = await self._resolution.resolve_asset(provider, native_id, supplied_credential)
        await self._cache.upsert(self._cacheable_copy(asset))
        logger.info("Asset saved", provider=asset.provider.value, native_id=asset.native_id)
        return asset

    async def sync_provider(
        self,
        provider: ProviderName | str,
        options: ListOptions | None = None,
        supplied_credential: str | None = None,
    ) -> int:
        """Cache one page of a provider catalog.

        Rows that fail to save are logged and skipped.

        Returns:
            Number of assets saved

        Raises:
            ResolutionError: If the listing could not be fetched
        """
        page = await self._resolution.list_assets(provider, options, supplied_credential)
        saved = 0
        for asset in page.items:
            try:
                await self._cache.upsert(self._cacheable_copy(asset))
                saved += 1
            except DatabaseError as e:
                logger.warning(
                    "Skipping asset that failed to save",
                    provider=asset.provider.value,
                    native_id=asset.native_id,
                    error=str(e),
                )
        logger.info(
            "Provider catalog synced",
            provider=parse_provider(provider).value,
            saved=saved,
            listed=len(page.items),
        )
        return saved

    async def search(
        self,
        term: str | None = None,
        provider: ProviderName | str | None = None,
    ) -> list[ProviderAsset]:
        """Search cached assets by name, provider or language (case-insensitive)."""
        assets = await self._cache.list_assets(
            parse_provider(provider) if provider is not None else None
        )
        if not term:
            return assets

        needle = term.lower()
        return [
            asset
            for asset in assets
            if needle in asset.display_name.lower()
            or needle in asset.provider.value.lower()
            or needle in asset.language.lower()
        ]

    async def get_cached(
        self, provider: ProviderName | str, native_id: str
    ) -> ProviderAsset | None:
        """Cached asset, or None when it was never saved."""
        return await self._cache.get(parse_provider(provider), native_id)


__all__ = ["AssetCatalog"]
