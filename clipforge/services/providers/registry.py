"""Provider registry.

Static, closed mapping from provider identifier to client. This is the only
seam through which the rest of the application reaches a provider.
"""

from clipforge.core.logging import get_logger
from clipforge.infrastructure.http_client import HTTPClient
from clipforge.services.providers.base import ProviderClient, ProviderName
from clipforge.services.providers.elevenlabs import ElevenLabsClient
from clipforge.services.providers.fish_audio import FishAudioClient
from clipforge.services.providers.minimax import MinimaxClient
from clipforge.services.providers.runware import RunwareClient

logger = get_logger(__name__)

PROVIDER_CLIENTS: dict[ProviderName, type[ProviderClient]] = {
    ProviderName.FISH_AUDIO: FishAudioClient,
    ProviderName.ELEVENLABS: ElevenLabsClient,
    ProviderName.MINIMAX: MinimaxClient,
    ProviderName.RUNWARE: RunwareClient,
}


def parse_provider(provider: ProviderName | str) -> ProviderName:
    """Coerce a provider identifier into a ProviderName.

    Raises:
        ValueError: If the identifier is not a supported provider
    """
    if isinstance(provider, ProviderName):
        return provider
    try:
        return ProviderName(provider)
    except ValueError:
        raise ValueError(f"Unsupported provider: {provider}") from None


class ProviderRegistry:
    """Holds one client instance per supported provider.

    Clients share the injected HTTPClient. Asking for an unsupported
    provider is a programming error and raises immediately.

    Example:
        >>> registry = ProviderRegistry(http_client)
        >>> client = registry.get("ElevenLabs")
        >>> voice = await client.fetch_detail("21m00Tcm4TlvDq8ikWAM", api_key)
    """

    def __init__(self, http_client: HTTPClient) -> None:
        self._clients: dict[ProviderName, ProviderClient] = {
            name: client_class(http_client) for name, client_class in PROVIDER_CLIENTS.items()
        }
        logger.debug("Provider registry initialized", providers=[p.value for p in self._clients])

    @property
    def providers(self) -> list[ProviderName]:
        """Supported providers."""
        return list(self._clients)

    def get(self, provider: ProviderName | str) -> ProviderClient:
        """Get the client for a provider.

        Raises:
            ValueError: If provider is not supported
        """
        return self._clients[parse_provider(provider)]


__all__ = [
    "PROVIDER_CLIENTS",
    "ProviderRegistry",
    "parse_provider",
]
