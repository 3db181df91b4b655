"""Tests for the Runware client."""

import pytest

from clipforge.core.exceptions import NotFound, UnknownProviderError
from clipforge.services.providers.base import CreditUnit, ListOptions, ProviderName
from clipforge.services.providers.runware import (
    RUNWARE_API_URL,
    RunwareClient,
    extract_preview_url,
    normalize_runware,
)


@pytest.fixture
def model_payload() -> dict:
    """Raw Runware model entry."""
    return {
        "air": "civitai:4201@130072",
        "name": "Realistic Vision",
        "category": "checkpoint",
        "tags": ["photorealistic"],
        "baseModel": "SD 1.5",
        "previewImage": "https://im.runware.ai/preview.jpg",
        "downloadCount": 1000,
    }


@pytest.mark.unit
class TestRunwareNormalization:
    """Tests for normalize_runware."""

    def test_normalize(self, model_payload):
        """Test field mapping."""
        asset = normalize_runware(model_payload)

        assert asset.provider == ProviderName.RUNWARE
        assert asset.native_id == "civitai:4201@130072"
        assert asset.language == "Not applicable"
        assert asset.gender == "checkpoint"
        assert asset.preview_url == "https://im.runware.ai/preview.jpg"
        assert asset.extras["base_model"] == "SD 1.5"
        assert asset.extras["download_count"] == 1000

    def test_image_url_fallback(self):
        """Test imageUrl is used when previewImage is absent."""
        assert extract_preview_url({"imageUrl": "https://im.test/a.png"}) == "https://im.test/a.png"


@pytest.mark.unit
class TestRunwareClient:
    """Tests for RunwareClient."""

    @pytest.mark.asyncio
    async def test_fetch_raw_sends_model_search(
        self, mock_http_client, make_response, model_payload
    ):
        """Test the detail call is a single modelSearch task."""
        mock_http_client.request.return_value = make_response(
            200, {"data": [{"models": [model_payload], "totalResults": 1}]}
        )
        client = RunwareClient(mock_http_client)

        raw = await client.fetch_raw("civitai:4201@130072", "rw-key")

        assert raw == model_payload
        args, kwargs = mock_http_client.request.call_args
        assert args == ("POST", RUNWARE_API_URL)
        task = kwargs["json"][0]
        assert task["taskType"] == "modelSearch"
        assert task["search"] == "civitai:4201@130072"
        assert task["limit"] == 1
        assert task["visibility"] == ["public", "community"]
        assert task["taskUUID"]

    @pytest.mark.asyncio
    async def test_fetch_raw_empty(self, mock_http_client, make_response):
        """Test empty search raises NotFound."""
        mock_http_client.request.return_value = make_response(200, {"data": [{"models": []}]})
        client = RunwareClient(mock_http_client)

        with pytest.raises(NotFound):
            await client.fetch_raw("civitai:0@0", "rw-key")

    @pytest.mark.asyncio
    async def test_list_uses_offset(self, mock_http_client, make_response, model_payload):
        """Test pagination is translated to limit/offset."""
        mock_http_client.request.return_value = make_response(
            200, {"data": [{"models": [model_payload], "totalResults": 95}]}
        )
        client = RunwareClient(mock_http_client)

        page = await client.list_assets("rw-key", ListOptions(page=3, page_size=10))

        task = mock_http_client.request.call_args[1]["json"][0]
        assert task["limit"] == 10
        assert task["offset"] == 20
        assert page.page_info.total == 95
        assert page.page_info.total_pages == 10

    @pytest.mark.asyncio
    async def test_models_not_a_list(self, mock_http_client, make_response):
        """Test a models field of the wrong type is classified."""
        mock_http_client.request.return_value = make_response(
            200, {"data": [{"models": "civitai:4201@130072"}]}
        )
        client = RunwareClient(mock_http_client)

        with pytest.raises(UnknownProviderError):
            await client.fetch_raw("civitai:4201@130072", "rw-key")

    @pytest.mark.asyncio
    async def test_fetch_credits(self, mock_http_client, make_response):
        """Test the balance comes from an accountManagement task."""
        mock_http_client.request.return_value = make_response(
            200, {"data": [{"taskType": "accountManagement", "balance": 18.4}]}
        )
        client = RunwareClient(mock_http_client)

        credits = await client.fetch_credits("rw-key")

        args, kwargs = mock_http_client.request.call_args
        assert args == ("POST", RUNWARE_API_URL)
        task = kwargs["json"][0]
        assert task["taskType"] == "accountManagement"
        assert task["operation"] == "getDetails"
        assert task["taskUUID"]
        assert kwargs["headers"]["Authorization"] == "Bearer rw-key"
        assert credits.balance == 18.4
        assert credits.unit == CreditUnit.DOLLARS
        assert credits.provider == ProviderName.RUNWARE

    @pytest.mark.asyncio
    async def test_fetch_credits_without_result(self, mock_http_client, make_response):
        """Test an empty task result reports no balance."""
        mock_http_client.request.return_value = make_response(200, {"data": []})
        client = RunwareClient(mock_http_client)

        credits = await client.fetch_credits("rw-key")

        assert credits.balance == 0
