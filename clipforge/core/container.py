"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Lifecycles:
- Singleton: One instance for the entire application (HTTP client, registry)
- Factory: New instance every time (stores, services, reconciliation loops)

Usage:
    # In FastAPI
    from clipforge.core.container import container

    @router.post("/{slug}/detail")
    async def detail(registry: ProviderRegistry = Depends(get_provider_registry)):
        ...

    # In tests
    with container.infrastructure.http_client.override(mock_http_client):
        ...
"""

from dependency_injector import containers, providers

from clipforge.core.config import Config, get_config
from clipforge.core.database import async_session_maker


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (database sessions, HTTP client)."""

    global_config = providers.Dependency(instance_of=Config)

    # ============================================
    # Database
    # ============================================

    # Shares the engine created in clipforge.core.database
    db_session_factory = providers.Object(async_session_maker)

    # ============================================
    # HTTP Client
    # ============================================

    http_client = providers.Singleton(
        "clipforge.infrastructure.http_client.HTTPClient",
        timeout=global_config.provided.provider_timeout_seconds,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies.

    Services are Factory providers; they receive infrastructure
    dependencies via injection.
    """

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()

    # ============================================
    # Stores
    # ============================================

    content_item_store = providers.Factory(
        "clipforge.services.store.ContentItemStore",
        db_session_factory=infrastructure.db_session_factory,
    )

    credential_store = providers.Factory(
        "clipforge.services.store.CredentialStore",
        db_session_factory=infrastructure.db_session_factory,
    )

    asset_cache_store = providers.Factory(
        "clipforge.services.store.AssetCacheStore",
        db_session_factory=infrastructure.db_session_factory,
    )

    # ============================================
    # Providers
    # ============================================

    provider_registry = providers.Singleton(
        "clipforge.services.providers.registry.ProviderRegistry",
        http_client=infrastructure.http_client,
    )

    # ============================================
    # Resolution
    # ============================================

    credential_resolver = providers.Factory(
        "clipforge.services.resolution.credentials.CredentialResolver",
        store=credential_store,
    )

    proxy_client = providers.Factory(
        "clipforge.services.resolution.proxy.ProxyClient",
        http_client=infrastructure.http_client,
        base_url=global_config.provided.proxy_base_url,
        auth_token=global_config.provided.proxy_auth_token,
    )

    resolution_service = providers.Factory(
        "clipforge.services.resolution.service.ResolutionService",
        registry=provider_registry,
        credential_resolver=credential_resolver,
        proxy_client=proxy_client,
    )

    asset_catalog = providers.Factory(
        "clipforge.services.resolution.catalog.AssetCatalog",
        resolution=resolution_service,
        cache=asset_cache_store,
    )

    # ============================================
    # Pipeline
    # ============================================

    # Called as container.services.channel_loop(channel_id=..., on_update=...)
    channel_loop = providers.Factory(
        "clipforge.services.pipeline.reconciliation.channel_loop",
        store=content_item_store,
        interval=global_config.provided.reconciliation_interval_seconds,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root application container.

    Composes all sub-containers and provides the main entry point.
    """

    # Uses get_config() to ensure same instance across the app
    config = providers.Singleton(get_config)

    # Sub-containers
    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
    )

    # ============================================
    # Convenience accessors (shortcuts)
    # ============================================

    http_client = providers.Singleton(
        lambda client: client,
        client=infrastructure.http_client,
    )

    provider_registry = providers.Singleton(
        lambda registry: registry,
        registry=services.provider_registry,
    )

    content_item_store = providers.Factory(
        lambda store: store,
        store=services.content_item_store,
    )

    credential_resolver = providers.Factory(
        lambda svc: svc,
        svc=services.credential_resolver,
    )

    resolution_service = providers.Factory(
        lambda svc: svc,
        svc=services.resolution_service,
    )

    asset_catalog = providers.Factory(
        lambda svc: svc,
        svc=services.asset_catalog,
    )


def create_container() -> ApplicationContainer:
    """Create and configure the application container.

    Returns:
        Configured ApplicationContainer instance
    """
    return ApplicationContainer()


# Global container instance
container = create_container()


def get_container() -> ApplicationContainer:
    """Get the global container (for FastAPI Depends)."""
    return container


__all__ = [
    "ApplicationContainer",
    "InfrastructureContainer",
    "ServiceContainer",
    "container",
    "create_container",
    "get_config",
    "get_container",
]
