"""Persistence collaborator.

Thin SQLAlchemy repositories for the three tables the core touches:
content items (read only), credentials (read only) and the provider asset
cache (read and upsert). Stage columns are never written here.
"""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError

from clipforge.core.exceptions import DatabaseError
from clipforge.core.logging import get_logger
from clipforge.core.types import SessionFactory
from clipforge.models.content_item import ContentItem
from clipforge.models.credential import Credential
from clipforge.models.provider_asset import CachedProviderAsset
from clipforge.services.providers.base import ProviderAsset, ProviderName

logger = get_logger(__name__)

_CACHE_COLUMNS = ("display_name", "language", "gender", "preview_url", "description", "extras")


class ContentItemStore:
    """Read access to content items."""

    def __init__(self, db_session_factory: SessionFactory) -> None:
        self._session_factory = db_session_factory

    async def list_items(
        self,
        channel_id: int | None = None,
        stages: Iterable[str] | None = None,
    ) -> list[ContentItem]:
        """Fetch content items, newest first.

        Args:
            channel_id: Only items of this channel
            stages: Only items whose stage is one of these values

        Returns:
            Matching content items

        Raises:
            DatabaseError: If the query fails
        """
        query = select(ContentItem).order_by(ContentItem.created_at.desc())
        if channel_id is not None:
            query = query.where(ContentItem.channel_id == channel_id)
        if stages is not None:
            query = query.where(ContentItem.stage.in_([str(stage) for stage in stages]))

        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to load content items",
                context={"channel_id": channel_id},
                operation="select",
            ) from e


class CredentialStore:
    """Read access to provider credentials."""

    def __init__(self, db_session_factory: SessionFactory) -> None:
        self._session_factory = db_session_factory

    async def get_credential(self, provider: str) -> str | None:
        """Fetch the stored secret for a provider.

        Args:
            provider: Provider identifier

        Returns:
            The secret, or None when no row exists

        Raises:
            DatabaseError: If the query fails
        """
        query = select(Credential.api_key).where(Credential.provider == provider)
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to load credential",
                context={"provider": provider},
                operation="select",
            ) from e


def _row_to_asset(row: CachedProviderAsset) -> ProviderAsset:
    return ProviderAsset(
        native_id=row.native_id,
        display_name=row.display_name,
        provider=ProviderName(row.provider),
        language=row.language,
        gender=row.gender,
        preview_url=row.preview_url,
        description=row.description,
        extras=row.extras or {},
    )


class AssetCacheStore:
    """Local cache of normalized provider assets keyed by (provider, native_id)."""

    def __init__(self, db_session_factory: SessionFactory) -> None:
        self._session_factory = db_session_factory

    async def get(self, provider: ProviderName, native_id: str) -> ProviderAsset | None:
        """Fetch one cached asset.

        Raises:
            DatabaseError: If the query fails
        """
        query = select(CachedProviderAsset).where(
            CachedProviderAsset.provider == provider.value,
            CachedProviderAsset.native_id == native_id,
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to load cached asset",
                context={"provider": provider.value, "native_id": native_id},
                operation="select",
            ) from e
        return _row_to_asset(row) if row is not None else None

    async def list_assets(self, provider: ProviderName | None = None) -> list[ProviderAsset]:
        """Fetch all cached assets, optionally for one provider, ordered by name.

        Raises:
            DatabaseError: If the query fails
        """
        query = select(CachedProviderAsset).order_by(CachedProviderAsset.display_name)
        if provider is not None:
            query = query.where(CachedProviderAsset.provider == provider.value)
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to list cached assets", operation="select") from e
        return [_row_to_asset(row) for row in rows]

    async def upsert(self, asset: ProviderAsset) -> None:
        """Insert or overwrite the cache row of an asset.

        Raises:
            DatabaseError: If the statement fails
        """
        values = asset.model_dump(mode="json")
        values["provider"] = asset.provider.value
        stmt = pg_insert(CachedProviderAsset).values(
            provider=values["provider"],
            native_id=values["native_id"],
            **{column: values[column] for column in _CACHE_COLUMNS},
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["provider", "native_id"],
            set_={column: stmt.excluded[column] for column in _CACHE_COLUMNS}
            | {"updated_at": func.now()},
        )
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to cache asset",
                context={"provider": asset.provider.value, "native_id": asset.native_id},
                operation="upsert",
            ) from e
        logger.debug("Asset cached", provider=asset.provider.value, native_id=asset.native_id)


__all__ = [
    "AssetCacheStore",
    "ContentItemStore",
    "CredentialStore",
]
