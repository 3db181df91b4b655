"""Cached provider asset ORM model.

Rows are keyed by (provider, native_id) and overwritten on every refresh.
"""

from typing import Any

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSON
from sqlalchemy.orm import Mapped, mapped_column

from clipforge.models.base import Base, IntegerIDMixin, TimestampMixin


class CachedProviderAsset(Base, IntegerIDMixin, TimestampMixin):
    """Locally cached copy of a normalized provider asset.

    Attributes:
        provider: Provider identifier
        native_id: Provider-native asset id
        display_name: Display name
        language: Language label
        gender: Gender or category label
        preview_url: Preview URL, empty for providers with expiring URLs
        description: Free-text description
        extras: Provider-specific extension fields
    """

    __tablename__ = "provider_assets"

    provider: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    native_id: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    language: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    gender: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    preview_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    extras: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("provider", "native_id", name="uq_provider_assets_provider_native_id"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<CachedProviderAsset(provider={self.provider}, native_id={self.native_id})>"


__all__ = ["CachedProviderAsset"]
