"""Single-owner preview playback.

Only one preview may be audible at a time. The controller owns at most one
handle and stops it before acquiring the next. It is created once and
passed to whatever needs to start or stop previews.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from clipforge.core.exceptions import UnsupportedOperation
from clipforge.core.logging import get_logger
from clipforge.services.providers.base import ProviderAsset
from clipforge.services.resolution.service import ResolutionService

logger = get_logger(__name__)


class PlaybackHandle(Protocol):
    """A playing preview."""

    async def stop(self) -> None: ...


class AudioBackend(Protocol):
    """Opens a playback handle for a URL (audio element, player process, ...).

    The backend calls ``on_finished`` with the handle when playback ends on
    its own, never after ``stop()``.
    """

    async def open(
        self, url: str, on_finished: Callable[[PlaybackHandle], None]
    ) -> PlaybackHandle: ...


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the controller."""

    is_playing: bool = False
    current_asset_id: str | None = None


class PlaybackController:
    """Owns the currently playing preview.

    Example:
        >>> controller = PlaybackController(backend, resolution_service)
        >>> handle = await controller.play_preview(voice)
        >>> if handle is None:
        ...     print("No preview available")
        >>> await controller.stop()
    """

    def __init__(self, backend: AudioBackend, resolution: ResolutionService) -> None:
        self._backend = backend
        self._resolution = resolution
        self._handle: PlaybackHandle | None = None
        self._asset_id: str | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> PlaybackState:
        """Current playback state."""
        return PlaybackState(is_playing=self._handle is not None, current_asset_id=self._asset_id)

    def is_playing(self, asset_id: str) -> bool:
        """Whether the preview of asset_id is the one playing."""
        return self._handle is not None and self._asset_id == asset_id

    async def _release(self) -> None:
        if self._handle is None:
            return
        handle, asset_id = self._handle, self._asset_id
        self._handle = None
        self._asset_id = None
        try:
            await handle.stop()
        except Exception as e:
            logger.warning("Failed to stop preview cleanly", asset_id=asset_id, error=str(e))

    async def start(self, asset_id: str, url: str) -> PlaybackHandle:
        """Stop any current preview, then play url.

        Args:
            asset_id: Id of the asset being previewed
            url: Absolute preview URL

        Returns:
            The new handle, now owned by the controller
        """
        async with self._lock:
            await self._release()
            handle = await self._backend.open(url, on_finished=self.notify_finished)
            self._handle = handle
            self._asset_id = asset_id
            logger.debug("Preview started", asset_id=asset_id)
            return handle

    async def stop(self) -> None:
        """Stop and release the current preview, if any."""
        async with self._lock:
            await self._release()

    def notify_finished(self, handle: PlaybackHandle) -> None:
        """Forget a handle that finished on its own.

        Passed to the backend as the completion callback. Ignored when the
        handle is no longer the current one.
        """
        if handle is self._handle:
            logger.debug("Preview finished", asset_id=self._asset_id)
            self._handle = None
            self._asset_id = None

    async def play_preview(
        self,
        asset: ProviderAsset,
        supplied_credential: str | None = None,
    ) -> PlaybackHandle | None:
        """Play the preview of an asset.

        Providers with expiring preview URLs are re-resolved on every call.
        A missing preview is not an error.

        Returns:
            Playback handle, or None when no preview is available

        Raises:
            ResolutionError: If re-resolving the asset failed
        """
        client = self._resolution.client_for(asset.provider)
        if not client.supports_preview:
            return None

        url = asset.preview_url
        if not client.cacheable:
            try:
                url = await self._resolution.resolve_preview_url(
                    asset.provider, asset.native_id, supplied_credential
                )
            except UnsupportedOperation:
                return None

        if not url:
            logger.debug(
                "No preview available", provider=asset.provider.value, native_id=asset.native_id
            )
            return None
        return await self.start(asset.native_id, url)


__all__ = [
    "AudioBackend",
    "PlaybackController",
    "PlaybackHandle",
    "PlaybackState",
]
