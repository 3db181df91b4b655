"""Credential ORM model.

One API key per provider, managed by admin tooling and read-only for the
resolution layer.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from clipforge.models.base import Base, IntegerIDMixin, TimestampMixin


class Credential(Base, IntegerIDMixin, TimestampMixin):
    """Stored provider API key.

    The provider column is unique, so a lookup never has to pick between
    several rows.

    Attributes:
        provider: Provider identifier (e.g. "ElevenLabs")
        api_key: Secret value
    """

    __tablename__ = "credentials"

    provider: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    api_key: Mapped[str] = mapped_column(String(500), nullable=False)

    def __repr__(self) -> str:
        """String representation without the secret."""
        return f"<Credential(id={self.id}, provider={self.provider})>"


__all__ = ["Credential"]
