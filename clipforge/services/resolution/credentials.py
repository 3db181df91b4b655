"""Credential resolution chain.

supplied credential -> credential store -> CredentialNotFound.
The demo sentinel step is applied by the resolution service, which knows
whether the provider documents a public demo tier.
"""

from typing import Protocol

from clipforge.core.exceptions import CredentialNotFound
from clipforge.core.logging import get_logger
from clipforge.services.providers.base import ProviderName

logger = get_logger(__name__)

DEMO_CREDENTIAL = "demo"


class CredentialSource(Protocol):
    """Anything able to look up a stored credential by provider."""

    async def get_credential(self, provider: str) -> str | None: ...


class CredentialResolver:
    """Resolve the credential to use for a provider call.

    No caching: every call re-reads the store so that rotated keys are
    picked up immediately.

    Example:
        >>> resolver = CredentialResolver(CredentialStore(session_factory))
        >>> api_key = await resolver.resolve(ProviderName.ELEVENLABS)
    """

    def __init__(self, store: CredentialSource) -> None:
        self._store = store

    async def resolve(self, provider: ProviderName, supplied: str | None = None) -> str:
        """Return the credential for provider.

        Args:
            provider: Provider to resolve for
            supplied: Caller-supplied credential, used unchanged when non-empty

        Returns:
            Credential secret

        Raises:
            CredentialNotFound: If nothing was supplied and nothing is stored
        """
        if supplied:
            return supplied

        stored = await self._store.get_credential(provider.value)
        if not stored:
            logger.info("No stored credential", provider=provider.value)
            raise CredentialNotFound(provider.value)
        return stored


__all__ = [
    "DEMO_CREDENTIAL",
    "CredentialResolver",
    "CredentialSource",
]
