"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from clipforge.core.logging import setup_logging
from clipforge.infrastructure.http_client import HTTPClient
from clipforge.models.content_item import ContentItem, ProductionMode

# Setup logging for tests
setup_logging()


@pytest.fixture
def mock_http_client() -> HTTPClient:
    """Create a mock HTTP client."""
    client = MagicMock(spec=HTTPClient)
    client.request = AsyncMock()
    client.post = AsyncMock()
    client.close = AsyncMock()
    client.timeout = 10.0
    return client


@pytest.fixture
def make_response() -> Callable[..., httpx.Response]:
    """Factory for real httpx responses.

    Returns:
        Callable building a response from a status code and JSON or text body
    """

    def _make(
        status_code: int = 200,
        json_data: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        request = httpx.Request("GET", "https://provider.test")
        if json_data is not None:
            return httpx.Response(status_code, json=json_data, headers=headers, request=request)
        return httpx.Response(status_code, text=text or "", headers=headers, request=request)

    return _make


@pytest.fixture
def make_item() -> Callable[..., ContentItem]:
    """Factory for unsaved ContentItem instances with explicit defaults."""

    def _make(**overrides: Any) -> ContentItem:
        fields: dict[str, Any] = {
            "id": 1,
            "channel_id": 1,
            "title": "Why cats sleep all day",
            "body": "Cats sleep up to sixteen hours a day.",
            "stage": "script_generated",
            "progress": None,
            "scheduled_publish_at": None,
            "audio_asset": None,
            "image_assets": [],
            "rendered_video": None,
            "has_captions": False,
            "production_mode": ProductionMode.IMAGES,
            "footage_refs": [],
        }
        fields.update(overrides)
        return ContentItem(**fields)

    return _make
