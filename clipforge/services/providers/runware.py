"""Runware image model catalog client.

Runware identifies models by AIR (e.g. ``civitai:4201@130072``) and exposes
them through a task-based API: every request is a list of tasks, every
response a ``data`` list with one entry per task.
API documentation: https://runware.ai/docs/en/utilities/model-search
"""

import uuid
from typing import Any

from clipforge.core.exceptions import NotFound
from clipforge.core.logging import get_logger
from clipforge.infrastructure.http_client import HTTPClient
from clipforge.services.providers.base import (
    AssetPage,
    CreditUnit,
    ListOptions,
    PageInfo,
    ProviderAsset,
    ProviderCredits,
    ProviderName,
    ProviderTransport,
    RawPage,
    absolute_url,
    expect_count,
    expect_object_list,
    normalize_payload,
    parse_amount,
)

logger = get_logger(__name__)

RUNWARE_API_URL = "https://api.runware.ai/v1"
MODEL_VISIBILITY = ["public", "community"]
NOT_APPLICABLE = "Not applicable"


def _model_search_task(limit: int, search: str | None = None, offset: int = 0) -> dict[str, Any]:
    task: dict[str, Any] = {
        "taskType": "modelSearch",
        "taskUUID": str(uuid.uuid4()),
        "visibility": MODEL_VISIBILITY,
        "limit": limit,
    }
    if search:
        task["search"] = search
    if offset:
        task["offset"] = offset
    return task


def _first_task_result(data: dict[str, Any]) -> dict[str, Any]:
    results = data.get("data")
    if isinstance(results, list) and results and isinstance(results[0], dict):
        return results[0]
    return {}


def extract_preview_url(raw: dict[str, Any]) -> str:
    """Pick the preview image of a model: ``previewImage`` then ``imageUrl``."""
    return absolute_url(raw.get("previewImage")) or absolute_url(raw.get("imageUrl"))


def normalize_runware(raw: dict[str, Any]) -> ProviderAsset:
    """Convert a Runware model entry into a ProviderAsset.

    Models have no language or gender, so the category takes the
    gender/category slot and language is marked not applicable.
    """
    return ProviderAsset(
        native_id=str(raw.get("air") or ""),
        display_name=raw.get("name") or "",
        provider=ProviderName.RUNWARE,
        language=NOT_APPLICABLE,
        gender=raw.get("category") or NOT_APPLICABLE,
        preview_url=extract_preview_url(raw),
        description=raw.get("description") or "",
        extras={
            "air": raw.get("air"),
            "tags": raw.get("tags") or [],
            "creator": raw.get("creator"),
            "base_model": raw.get("baseModel") or "",
            "type": raw.get("type") or "",
            "version": raw.get("version") or "",
            "download_count": raw.get("downloadCount") or 0,
            "like_count": raw.get("likeCount") or 0,
            "raw_data": raw,
        },
    )


def normalize_runware_credits(raw: dict[str, Any]) -> ProviderCredits:
    """Account balance from an accountManagement task result, in dollars."""
    details = _first_task_result(raw)
    return ProviderCredits(
        provider=ProviderName.RUNWARE,
        balance=parse_amount(details.get("balance")),
        unit=CreditUnit.DOLLARS,
        extras={"raw_data": raw},
    )


class RunwareClient:
    """Runware model search client."""

    provider = ProviderName.RUNWARE
    cacheable = True
    supports_preview = True
    supports_demo = False
    supports_credits = True

    def __init__(self, http_client: HTTPClient) -> None:
        self._transport = ProviderTransport(http_client, self.provider)

    @staticmethod
    def _headers(credential: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}", "Content-Type": "application/json"}

    async def fetch_raw(self, native_id: str, credential: str) -> dict[str, Any]:
        """Search for a model by AIR and return the first match.

        Raises:
            NotFound: If the search returns no model
        """
        data = await self._transport.request_object(
            "POST",
            RUNWARE_API_URL,
            headers=self._headers(credential),
            json=[_model_search_task(limit=1, search=native_id)],
            native_id=native_id,
        )
        models = expect_object_list(self.provider.value, _first_task_result(data).get("models"))
        if not models:
            logger.info("Runware model search returned nothing", air=native_id)
            raise NotFound(self.provider.value, native_id)
        return models[0]

    async def list_raw(self, credential: str, options: ListOptions) -> RawPage:
        """Search models page by page."""
        data = await self._transport.request_object(
            "POST",
            RUNWARE_API_URL,
            headers=self._headers(credential),
            json=[
                _model_search_task(
                    limit=options.page_size,
                    search=options.search,
                    offset=(options.page - 1) * options.page_size,
                )
            ],
        )
        result = _first_task_result(data)
        models = expect_object_list(self.provider.value, result.get("models"))
        total = expect_count(result.get("totalResults"), len(models))
        return RawPage(
            items=models,
            page_info=PageInfo.from_total(total, options.page, options.page_size),
        )

    def normalize(self, raw: dict[str, Any]) -> ProviderAsset:
        return normalize_payload(self.provider, normalize_runware, raw)

    async def fetch_detail(self, native_id: str, credential: str) -> ProviderAsset:
        return self.normalize(await self.fetch_raw(native_id, credential))

    async def list_assets(self, credential: str, options: ListOptions | None = None) -> AssetPage:
        page = await self.list_raw(credential, options or ListOptions())
        return page.normalized(self.normalize)

    async def fetch_credits_raw(self, credential: str) -> dict[str, Any]:
        """Run an accountManagement getDetails task."""
        return await self._transport.request_object(
            "POST",
            RUNWARE_API_URL,
            headers=self._headers(credential),
            json=[
                {
                    "taskType": "accountManagement",
                    "taskUUID": str(uuid.uuid4()),
                    "operation": "getDetails",
                }
            ],
        )

    def normalize_credits(self, raw: dict[str, Any]) -> ProviderCredits:
        return normalize_payload(self.provider, normalize_runware_credits, raw)

    async def fetch_credits(self, credential: str) -> ProviderCredits:
        return self.normalize_credits(await self.fetch_credits_raw(credential))


__all__ = [
    "RUNWARE_API_URL",
    "RunwareClient",
    "extract_preview_url",
    "normalize_runware",
    "normalize_runware_credits",
]
