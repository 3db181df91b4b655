"""Provider asset resolution.

- credentials: supplied -> stored credential chain
- proxy: primary path client
- service: primary/fallback orchestration
- catalog: cache-backed fetch, sync and search
- playback: single-owner preview playback
"""

from clipforge.services.resolution.catalog import AssetCatalog
from clipforge.services.resolution.credentials import DEMO_CREDENTIAL, CredentialResolver
from clipforge.services.resolution.playback import PlaybackController, PlaybackState
from clipforge.services.resolution.proxy import ProxyClient, ProxyResponse
from clipforge.services.resolution.service import ResolutionService

__all__ = [
    "AssetCatalog",
    "CredentialResolver",
    "DEMO_CREDENTIAL",
    "PlaybackController",
    "PlaybackState",
    "ProxyClient",
    "ProxyResponse",
    "ResolutionService",
]
