"""Common type definitions for the application.

This module provides shared type aliases used across multiple modules
to avoid duplication and ensure consistency.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

if TYPE_CHECKING:
    from clipforge.models.content_item import ContentItem

# Type alias for async session factory functions
# Used by stores that need to create database sessions
SessionFactory = Callable[[], AsyncSession]

# Zero-argument coroutine returning the current items of a pipeline view
ItemFetcher = Callable[[], Awaitable[Sequence["ContentItem"]]]

__all__ = [
    "ItemFetcher",
    "SessionFactory",
]
