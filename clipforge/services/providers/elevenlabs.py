"""ElevenLabs voice catalog client.

ElevenLabs authenticates with the ``xi-api-key`` header and exposes stable
preview URLs, so normalized voices may be cached with their preview.
API documentation: https://elevenlabs.io/docs/api-reference
"""

from typing import Any

from clipforge.core.logging import get_logger
from clipforge.infrastructure.http_client import HTTPClient
from clipforge.services.providers.base import (
    NOT_SPECIFIED,
    AssetPage,
    CreditUnit,
    ListOptions,
    ProviderAsset,
    ProviderCredits,
    ProviderName,
    ProviderTransport,
    RawPage,
    absolute_url,
    expect_object_list,
    normalize_payload,
    paginate_locally,
    parse_amount,
)

logger = get_logger(__name__)

ELEVENLABS_API_BASE = "https://api.elevenlabs.io/v1"

LANGUAGE_LABELS = {
    "en": "English",
    "pt": "Portuguese",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
}

GENDER_LABELS = {
    "male": "Male",
    "female": "Female",
    "neutral": "Neutral",
}


def extract_preview_url(raw: dict[str, Any]) -> str:
    """Pick the preview URL of an ElevenLabs voice.

    Priority: top-level ``preview_url``, then ``raw_data.preview_url``.
    """
    nested = raw.get("raw_data") if isinstance(raw.get("raw_data"), dict) else {}
    return absolute_url(raw.get("preview_url")) or absolute_url(nested.get("preview_url"))


def _labels(raw: dict[str, Any]) -> dict[str, Any]:
    labels = raw.get("labels")
    return labels if isinstance(labels, dict) else {}


def _language_label(code: str | None) -> str:
    if not isinstance(code, str) or not code:
        return LANGUAGE_LABELS["en"]
    return LANGUAGE_LABELS.get(code.lower(), code)


def _gender_label(value: str | None) -> str:
    if not value:
        return GENDER_LABELS["neutral"]
    return GENDER_LABELS.get(value.lower(), NOT_SPECIFIED)


def normalize_elevenlabs(raw: dict[str, Any]) -> ProviderAsset:
    """Convert an ElevenLabs voice payload into a ProviderAsset."""
    labels = _labels(raw)
    sharing = raw.get("sharing") or {}
    popularity = (sharing.get("liked_by_count") or 0) + (sharing.get("cloned_by_count") or 0)

    return ProviderAsset(
        native_id=str(raw.get("voice_id") or ""),
        display_name=raw.get("name") or "",
        provider=ProviderName.ELEVENLABS,
        language=_language_label(labels.get("language")),
        gender=_gender_label(labels.get("gender")),
        preview_url=extract_preview_url(raw),
        description=raw.get("description") or "",
        extras={
            "category": raw.get("category"),
            "age": labels.get("age"),
            "accent": labels.get("accent"),
            "use_case": labels.get("use_case"),
            "popularity": popularity,
            "settings": raw.get("settings"),
            "raw_data": raw,
        },
    )


def normalize_elevenlabs_credits(raw: dict[str, Any]) -> ProviderCredits:
    """Remaining characters of an ElevenLabs subscription."""
    limit = parse_amount(raw.get("character_limit"))
    used = parse_amount(raw.get("character_count"))
    return ProviderCredits(
        provider=ProviderName.ELEVENLABS,
        balance=limit - used,
        unit=CreditUnit.CHARACTERS,
        limit=limit,
        extras={"tier": raw.get("tier"), "raw_data": raw},
    )


class ElevenLabsClient:
    """ElevenLabs voice client.

    The voices endpoint returns the whole library at once; search and
    pagination are applied locally.
    """

    provider = ProviderName.ELEVENLABS
    cacheable = True
    supports_preview = True
    supports_demo = False
    supports_credits = True

    def __init__(self, http_client: HTTPClient) -> None:
        self._transport = ProviderTransport(http_client, self.provider)

    @staticmethod
    def _headers(credential: str) -> dict[str, str]:
        return {"xi-api-key": credential, "Accept": "application/json"}

    async def fetch_raw(self, native_id: str, credential: str) -> dict[str, Any]:
        """Fetch a voice payload by id."""
        return await self._transport.request_object(
            "GET",
            f"{ELEVENLABS_API_BASE}/voices/{native_id}",
            headers=self._headers(credential),
            native_id=native_id,
        )

    async def list_raw(self, credential: str, options: ListOptions) -> RawPage:
        """List the voice library, filtered and paginated locally."""
        data = await self._transport.request_object(
            "GET",
            f"{ELEVENLABS_API_BASE}/voices",
            headers=self._headers(credential),
            params={"show_legacy": str(options.show_legacy).lower()},
        )
        voices = expect_object_list(self.provider.value, data.get("voices"))

        if options.search:
            term = options.search.lower()
            voices = [v for v in voices if term in str(v.get("name") or "").lower()]
        if options.language:
            wanted = options.language.lower()
            voices = [
                v
                for v in voices
                if wanted in _language_label(_labels(v).get("language")).lower()
            ]

        logger.debug("ElevenLabs voices listed", count=len(voices))
        return paginate_locally(voices, options)

    def normalize(self, raw: dict[str, Any]) -> ProviderAsset:
        return normalize_payload(self.provider, normalize_elevenlabs, raw)

    async def fetch_detail(self, native_id: str, credential: str) -> ProviderAsset:
        return self.normalize(await self.fetch_raw(native_id, credential))

    async def list_assets(self, credential: str, options: ListOptions | None = None) -> AssetPage:
        page = await self.list_raw(credential, options or ListOptions())
        return page.normalized(self.normalize)

    async def fetch_credits_raw(self, credential: str) -> dict[str, Any]:
        """Fetch the subscription, which carries the character allowance."""
        return await self._transport.request_object(
            "GET",
            f"{ELEVENLABS_API_BASE}/user/subscription",
            headers=self._headers(credential),
        )

    def normalize_credits(self, raw: dict[str, Any]) -> ProviderCredits:
        return normalize_payload(self.provider, normalize_elevenlabs_credits, raw)

    async def fetch_credits(self, credential: str) -> ProviderCredits:
        return self.normalize_credits(await self.fetch_credits_raw(credential))


__all__ = [
    "ELEVENLABS_API_BASE",
    "ElevenLabsClient",
    "extract_preview_url",
    "normalize_elevenlabs",
    "normalize_elevenlabs_credits",
]
