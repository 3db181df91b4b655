"""Base model mixins and utilities.

This module provides reusable mixins for common model patterns:
- IntegerIDMixin: autoincrementing integer primary key
- TimestampMixin: created_at and updated_at fields
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from clipforge.core.database import Base


class IntegerIDMixin:
    """Mixin for an integer primary key.

    Example:
        >>> class Credential(Base, IntegerIDMixin, TimestampMixin):
        ...     __tablename__ = "credentials"
        ...     provider: Mapped[str]
    """

    @declared_attr
    @classmethod
    def id(cls) -> Mapped[int]:
        """Integer primary key.

        Returns:
            Integer column mapped to primary key
        """
        return mapped_column(Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps.

    Provides automatic timestamp tracking for create and update operations.
    """

    @declared_attr
    @classmethod
    def created_at(cls) -> Mapped[datetime]:
        """Timestamp when record was created.

        Returns:
            DateTime column with default as current UTC time
        """
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        )

    @declared_attr
    @classmethod
    def updated_at(cls) -> Mapped[datetime]:
        """Timestamp when record was last updated.

        Returns:
            DateTime column that updates automatically
        """
        return mapped_column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        )


__all__ = [
    "Base",
    "IntegerIDMixin",
    "TimestampMixin",
]
