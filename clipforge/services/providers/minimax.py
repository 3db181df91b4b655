"""Minimax voice catalog client.

Minimax has no per-voice endpoint: the client fetches the system voice list
and picks the requested entry. Voices carry no preview audio, and language
and gender have to be inferred from the voice id and description keywords.
"""

import re
from typing import Any

from clipforge.core.exceptions import NotFound, UnsupportedOperation
from clipforge.core.logging import get_logger
from clipforge.infrastructure.http_client import HTTPClient
from clipforge.services.providers.base import (
    NOT_SPECIFIED,
    AssetPage,
    ListOptions,
    ProviderAsset,
    ProviderCredits,
    ProviderName,
    ProviderTransport,
    RawPage,
    expect_object_list,
    normalize_payload,
    paginate_locally,
)

logger = get_logger(__name__)

MINIMAX_VOICE_LIST_URL = "https://api.minimax.chat/v1/text_to_speech/voice_list"

# Checked in order against the lowercased voice id
LANGUAGE_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("english",), "English"),
    (("chinese", "mandarin"), "Chinese"),
    (("spanish",), "Spanish"),
    (("french",), "French"),
    (("german",), "German"),
    (("portuguese",), "Portuguese"),
    (("japanese",), "Japanese"),
    (("korean",), "Korean"),
]


def detect_language(voice_id: str) -> str:
    """Infer a language label from keywords in a Minimax voice id.

    Example:
        >>> detect_language("English_Graceful_Lady")
        'English'
    """
    lowered = voice_id.lower()
    for keywords, label in LANGUAGE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return label
    return NOT_SPECIFIED


def detect_gender(description: list[str] | str | None) -> str:
    """Infer a gender label from the words of a Minimax voice description.

    Words are matched whole, so "female" never counts as "male" and
    "woman" never counts as "man".
    """
    if isinstance(description, list):
        text = " ".join(str(part) for part in description)
    else:
        text = description or ""
    words = set(re.findall(r"[a-z]+", text.lower()))

    if "male" in words and "female" not in words:
        return "Male"
    if "female" in words and "male" not in words:
        return "Female"
    if words & {"girl", "woman", "women"}:
        return "Female"
    if words & {"boy", "man", "men"}:
        return "Male"
    return NOT_SPECIFIED


def _description_text(description: Any) -> str:
    if isinstance(description, list):
        return ", ".join(str(part) for part in description)
    return description or ""


def normalize_minimax(raw: dict[str, Any]) -> ProviderAsset:
    """Convert a Minimax system voice entry into a ProviderAsset."""
    voice_id = str(raw.get("voice_id") or "")
    return ProviderAsset(
        native_id=voice_id,
        display_name=raw.get("voice_name") or voice_id,
        provider=ProviderName.MINIMAX,
        language=detect_language(voice_id),
        gender=detect_gender(raw.get("description")),
        preview_url="",
        description=_description_text(raw.get("description")),
        extras={
            "created_time": raw.get("created_time"),
            "raw_data": raw,
        },
    )


class MinimaxClient:
    """Minimax system voice client.

    Previews are not offered by Minimax, so ``supports_preview`` is False
    and normalized voices always have an empty preview URL.
    Minimax reports no account balance either.
    """

    provider = ProviderName.MINIMAX
    cacheable = True
    supports_preview = False
    supports_demo = False
    supports_credits = False

    def __init__(self, http_client: HTTPClient) -> None:
        self._transport = ProviderTransport(http_client, self.provider)

    @staticmethod
    def _headers(credential: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}", "Content-Type": "application/json"}

    async def _system_voices(self, credential: str) -> list[dict[str, Any]]:
        data = await self._transport.request_object(
            "GET", MINIMAX_VOICE_LIST_URL, headers=self._headers(credential)
        )
        return expect_object_list(self.provider.value, data.get("system_voice"))

    async def fetch_raw(self, native_id: str, credential: str) -> dict[str, Any]:
        """Fetch the voice list and return the entry matching native_id.

        Raises:
            NotFound: If the list holds no such voice
        """
        voices = await self._system_voices(credential)
        for voice in voices:
            if voice.get("voice_id") == native_id:
                return voice
        logger.info("Minimax voice not in system list", voice_id=native_id, listed=len(voices))
        raise NotFound(self.provider.value, native_id)

    async def list_raw(self, credential: str, options: ListOptions) -> RawPage:
        """List system voices filtered by search term and language."""
        voices = await self._system_voices(credential)

        if options.search:
            term = options.search.lower()
            voices = [
                v
                for v in voices
                if term in str(v.get("voice_name") or "").lower()
                or term in str(v.get("voice_id") or "").lower()
                or term in _description_text(v.get("description")).lower()
            ]
        if options.language:
            wanted = options.language.lower()
            voices = [
                v for v in voices if wanted in detect_language(str(v.get("voice_id") or "")).lower()
            ]

        return paginate_locally(voices, options)

    def normalize(self, raw: dict[str, Any]) -> ProviderAsset:
        return normalize_payload(self.provider, normalize_minimax, raw)

    async def fetch_detail(self, native_id: str, credential: str) -> ProviderAsset:
        return self.normalize(await self.fetch_raw(native_id, credential))

    async def list_assets(self, credential: str, options: ListOptions | None = None) -> AssetPage:
        page = await self.list_raw(credential, options or ListOptions())
        return page.normalized(self.normalize)

    async def fetch_credits_raw(self, credential: str) -> dict[str, Any]:
        raise UnsupportedOperation(self.provider.value, "credit lookup")

    def normalize_credits(self, raw: dict[str, Any]) -> ProviderCredits:
        raise UnsupportedOperation(self.provider.value, "credit lookup")

    async def fetch_credits(self, credential: str) -> ProviderCredits:
        raise UnsupportedOperation(self.provider.value, "credit lookup")


__all__ = [
    "MINIMAX_VOICE_LIST_URL",
    "MinimaxClient",
    "detect_gender",
    "detect_language",
    "normalize_minimax",
]
