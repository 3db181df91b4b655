"""Fish Audio voice catalog client.

Fish Audio serves sample audio through signed, time-limited storage URLs
(X-Amz-* query parameters). Those URLs must never be cached; playback
re-resolves the voice every time.
API documentation: https://docs.fish.audio/
"""

from typing import Any

from clipforge.core.logging import get_logger
from clipforge.infrastructure.http_client import HTTPClient
from clipforge.services.providers.base import (
    NOT_SPECIFIED,
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

FISH_AUDIO_API_BASE = "https://api.fish.audio"


def _first_sample_audio(samples: Any) -> str:
    if isinstance(samples, list) and samples and isinstance(samples[0], dict):
        return absolute_url(samples[0].get("audio"))
    return ""


def extract_preview_url(raw: dict[str, Any]) -> str:
    """Pick the preview URL of a Fish Audio model.

    Priority: first sample's audio, then the top-level ``preview_url``, then
    the first sample of an embedded ``raw_data`` payload. Empty when none is
    usable.
    """
    nested = raw.get("raw_data") if isinstance(raw.get("raw_data"), dict) else {}
    for candidate in (
        _first_sample_audio(raw.get("samples")),
        absolute_url(raw.get("preview_url")),
        _first_sample_audio(nested.get("samples")),
    ):
        if candidate:
            return candidate
    return ""


def normalize_fish_audio(raw: dict[str, Any]) -> ProviderAsset:
    """Convert a Fish Audio model payload into a ProviderAsset."""
    languages = raw.get("languages") or []
    author = raw.get("author")
    if isinstance(author, dict):
        author = author.get("nickname")

    return ProviderAsset(
        native_id=str(raw.get("_id") or raw.get("voice_id") or ""),
        display_name=raw.get("title") or raw.get("name") or "",
        provider=ProviderName.FISH_AUDIO,
        language=", ".join(languages) if languages else NOT_SPECIFIED,
        gender=NOT_SPECIFIED,
        preview_url=extract_preview_url(raw),
        description=raw.get("description") or "",
        extras={
            "author": author,
            "popularity": raw.get("like_count") or 0,
            "task_count": raw.get("task_count") or 0,
            "samples": raw.get("samples") or [],
            "raw_data": raw,
        },
    )


def normalize_fish_audio_credits(raw: dict[str, Any]) -> ProviderCredits:
    """API credit of a Fish Audio wallet, in dollars."""
    return ProviderCredits(
        provider=ProviderName.FISH_AUDIO,
        balance=parse_amount(raw.get("credit")),
        unit=CreditUnit.DOLLARS,
        extras={"raw_data": raw},
    )


class FishAudioClient:
    """Fish Audio model (voice) client.

    Fish Audio documents a public demo tier, so the resolution layer may
    fall back to the demo credential when nothing else is configured.

    Example:
        >>> client = FishAudioClient(http_client)
        >>> voice = await client.fetch_detail("8ef4a238714b45718ce04243307c57a7", api_key)
    """

    provider = ProviderName.FISH_AUDIO
    cacheable = False
    supports_preview = True
    supports_demo = True
    supports_credits = True

    def __init__(self, http_client: HTTPClient) -> None:
        self._transport = ProviderTransport(http_client, self.provider)

    @staticmethod
    def _headers(credential: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}", "Accept": "application/json"}

    async def fetch_raw(self, native_id: str, credential: str) -> dict[str, Any]:
        """Fetch a model payload by id."""
        return await self._transport.request_object(
            "GET",
            f"{FISH_AUDIO_API_BASE}/model/{native_id}",
            headers=self._headers(credential),
            native_id=native_id,
        )

    async def list_raw(self, credential: str, options: ListOptions) -> RawPage:
        """List models with server-side pagination."""
        params: dict[str, Any] = {"page_size": options.page_size, "page_number": options.page}
        if options.search:
            params["title"] = options.search
        if options.language:
            params["language"] = options.language

        data = await self._transport.request_object(
            "GET",
            f"{FISH_AUDIO_API_BASE}/model",
            headers=self._headers(credential),
            params=params,
        )
        items = expect_object_list(self.provider.value, data.get("items"))
        total = expect_count(data.get("total"), len(items))
        logger.debug("Fish Audio models listed", count=len(items), total=total)
        return RawPage(
            items=items,
            page_info=PageInfo.from_total(total, options.page, options.page_size),
        )

    def normalize(self, raw: dict[str, Any]) -> ProviderAsset:
        return normalize_payload(self.provider, normalize_fish_audio, raw)

    async def fetch_detail(self, native_id: str, credential: str) -> ProviderAsset:
        return self.normalize(await self.fetch_raw(native_id, credential))

    async def list_assets(self, credential: str, options: ListOptions | None = None) -> AssetPage:
        page = await self.list_raw(credential, options or ListOptions())
        return page.normalized(self.normalize)

    async def fetch_credits_raw(self, credential: str) -> dict[str, Any]:
        """Fetch the API credit of the wallet owning the credential."""
        return await self._transport.request_object(
            "GET",
            f"{FISH_AUDIO_API_BASE}/wallet/self/api-credit",
            headers=self._headers(credential),
        )

    def normalize_credits(self, raw: dict[str, Any]) -> ProviderCredits:
        return normalize_payload(self.provider, normalize_fish_audio_credits, raw)

    async def fetch_credits(self, credential: str) -> ProviderCredits:
        return self.normalize_credits(await self.fetch_credits_raw(credential))


__all__ = [
    "FISH_AUDIO_API_BASE",
    "FishAudioClient",
    "extract_preview_url",
    "normalize_fish_audio",
    "normalize_fish_audio_credits",
]
