"""SQLAlchemy ORM models.

- ContentItem: scripts/videos tracked through the production pipeline
- Credential: one provider API key per provider
- CachedProviderAsset: local cache of normalized provider assets
"""

from clipforge.models.base import Base, IntegerIDMixin, TimestampMixin
from clipforge.models.content_item import ContentItem, ProductionMode
from clipforge.models.credential import Credential
from clipforge.models.provider_asset import CachedProviderAsset

__all__ = [
    "Base",
    "IntegerIDMixin",
    "TimestampMixin",
    "ContentItem",
    "ProductionMode",
    "Credential",
    "CachedProviderAsset",
]
