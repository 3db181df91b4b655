"""Third-party provider clients.

One client per provider, each normalizing its payloads into ProviderAsset:
- Fish-Audio, ElevenLabs, Minimax: TTS voice catalogs
- Runware: image model catalog
"""

from clipforge.services.providers.base import (
    AssetPage,
    ListOptions,
    PageInfo,
    ProviderAsset,
    ProviderClient,
    ProviderName,
    RawPage,
)
from clipforge.services.providers.registry import PROVIDER_CLIENTS, ProviderRegistry, parse_provider

__all__ = [
    "AssetPage",
    "ListOptions",
    "PageInfo",
    "ProviderAsset",
    "ProviderClient",
    "ProviderName",
    "RawPage",
    "PROVIDER_CLIENTS",
    "ProviderRegistry",
    "parse_provider",
]
