"""
UploadClient - High-level async client for chunked HTTP uploads.

Example:
    >>> async with UploadClient() as client:
    ...     handle = client.add_file("video.mp4")
    ...     state = await client.upload(handle, "https://example.com/upload", chunk_size=1024 * 1024)
    ...     print(state.status)
"""
import asyncio
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import aiohttp

from .core.config import TransportConfig
from .core.events import EventSink
from .core.logging import get_logger
from .core.upload import (
    AiohttpTransport,
    CapabilityProfile,
    FileHandle,
    FileRegistry,
    TransferState,
    UploadCoordinator,
    UploadSettings,
)


class UploadClient:
    """
    Async client owning one HTTP session, a file registry and the upload
    coordinator.

    Default settings apply to every upload and can be overridden per call:
        >>> client = UploadClient(settings=UploadSettings(chunk_size=512 * 1024))
        >>> await client.upload(handle, url, multipart=False)
    """

    def __init__(
        self,
        *,
        config: Optional[TransportConfig] = None,
        settings: Optional[UploadSettings] = None,
        profile: Optional[CapabilityProfile] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the client.

        Args:
            config: Transport configuration
            settings: Default upload settings
            profile: Capability profile; detected when omitted
            session: Optional aiohttp session to reuse (not closed by the client)
        """
        self._logger = get_logger('chunkload.client')
        self._config = config or TransportConfig.default()
        self._settings = settings or UploadSettings()
        self._registry = FileRegistry()
        self._transport = AiohttpTransport(self._config, session=session)
        self._coordinator = UploadCoordinator(
            transport=self._transport,
            profile=profile,
            registry=self._registry
        )

    # =========================================================================
    # Context manager
    # =========================================================================

    async def __aenter__(self) -> 'UploadClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        """Cancel running uploads and release the HTTP session."""
        await self._coordinator.close()

    # =========================================================================
    # Files
    # =========================================================================

    @property
    def registry(self) -> FileRegistry:
        return self._registry

    @property
    def coordinator(self) -> UploadCoordinator:
        return self._coordinator

    @property
    def profile(self) -> CapabilityProfile:
        return self._coordinator.profile

    def add_file(self, file_path: Union[str, Path], target_name: Optional[str] = None) -> FileHandle:
        """Register a local file for upload."""
        return self._registry.add(file_path, target_name=target_name)

    def add_files(self, file_paths: Iterable[Union[str, Path]]) -> List[FileHandle]:
        """Register several files, skipping duplicate names."""
        return self._registry.add_many(file_paths)

    def remove_file(self, file_id: str) -> FileHandle:
        """Forget a file, cancelling its upload and dropping its transfer state."""
        self._coordinator.forget(file_id)
        return self._registry.remove(file_id)

    # =========================================================================
    # Uploads
    # =========================================================================

    def _merge_settings(self, settings: Optional[UploadSettings], overrides: Dict[str, Any]) -> UploadSettings:
        base = settings or self._settings
        if not overrides:
            return base
        values = {
            'chunk_size': base.chunk_size,
            'multipart': base.multipart,
            'multipart_fixed_fields': dict(base.multipart_fixed_fields),
            'multipart_params_extra': dict(base.multipart_params_extra),
            'file_field_name': base.file_field_name,
            'headers': dict(base.headers),
        }
        unknown = set(overrides) - set(values)
        if unknown:
            raise TypeError(f"Unknown upload settings: {', '.join(sorted(unknown))}")
        values.update(overrides)
        return UploadSettings(**values)

    def start_upload(
        self,
        file: Union[FileHandle, str],
        url: str,
        settings: Optional[UploadSettings] = None,
        sink: Optional[EventSink] = None,
        **overrides
    ) -> asyncio.Task:
        """
        Start an upload in the background.

        Args:
            file: File handle or registered file id
            url: Upload endpoint
            settings: Settings replacing the client defaults
            sink: Receiver of this file's events
            **overrides: Individual UploadSettings fields

        Returns:
            Task resolving to the terminal TransferState
        """
        merged = self._merge_settings(settings, overrides)
        return self._coordinator.start_upload(file, url, merged, sink)

    async def upload(
        self,
        file: Union[FileHandle, str],
        url: str,
        settings: Optional[UploadSettings] = None,
        sink: Optional[EventSink] = None,
        **overrides
    ) -> TransferState:
        """
        Upload a file and wait for the transfer to end.

        Example:
            # Whole file in one multipart request
            await client.upload(handle, url)

            # 1 MB chunks sent as raw octet streams
            await client.upload(handle, url, chunk_size=1024 * 1024, multipart=False)
        """
        return await self.start_upload(file, url, settings, sink, **overrides)

    def cancel(self, file_id: str) -> bool:
        """Cancel an upload; no-op for unknown or finished ids."""
        return self._coordinator.cancel(file_id)

    def get_state(self, file_id: str) -> Optional[TransferState]:
        return self._coordinator.get_state(file_id)
