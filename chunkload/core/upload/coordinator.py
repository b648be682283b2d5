"""
Upload coordinator.

Owns the active transport sessions, one per file id, and routes the
inbound commands (upload, cancel) to them. Sessions of different files run
concurrently; their capability profile is shared read-only.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Set, Union

from .capabilities import CapabilityProfile
from .models import FileHandle, TransferState, UploadSettings
from .protocols import TransportProtocol
from .services import FileRegistry
from .session import TransportSession
from ..events import EventSink
from ..exceptions import UploadInProgressError

logger = logging.getLogger('chunkload.upload.coordinator')


class UploadCoordinator:
    """
    Coordinates file uploads.

    Uses dependency injection for the transport, the capability profile and
    the file registry, making it:
    - Testable (in-memory transport)
    - Extensible (swap transports)
    """

    def __init__(
        self,
        transport: TransportProtocol,
        profile: Optional[CapabilityProfile] = None,
        registry: Optional[FileRegistry] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            transport: Transport shared by all sessions
            profile: Capability profile; detected once when omitted
            registry: File registry used to resolve file ids
        """
        self._transport = transport
        self._profile = profile or CapabilityProfile.detect()
        self._registry = registry or FileRegistry()
        self._sessions: Dict[str, TransportSession] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._finished: Dict[str, TransferState] = {}
        self._forgotten: Set[str] = set()

    @property
    def profile(self) -> CapabilityProfile:
        return self._profile

    @property
    def registry(self) -> FileRegistry:
        return self._registry

    @property
    def active_ids(self) -> List[str]:
        return list(self._sessions)

    def is_active(self, file_id: str) -> bool:
        return file_id in self._sessions

    def get_state(self, file_id: str) -> Optional[TransferState]:
        """Current state of an active upload, or the last state of a finished one."""
        session = self._sessions.get(file_id)
        if session is not None:
            return session.state
        return self._finished.get(file_id)

    def _resolve(self, file: Union[FileHandle, str]) -> FileHandle:
        if isinstance(file, FileHandle):
            return file
        return self._registry.get(file)

    def start_upload(
        self,
        file: Union[FileHandle, str],
        url: str,
        settings: Optional[UploadSettings] = None,
        sink: Optional[EventSink] = None
    ) -> asyncio.Task:
        """
        Start uploading a file in the background.

        Args:
            file: File handle or registered file id
            url: Upload endpoint
            settings: Upload settings
            sink: Receiver of this file's events

        Returns:
            Task resolving to the terminal TransferState

        Raises:
            UploadInProgressError: If the file is already uploading
            UnknownFileError: If the file id is not registered
        """
        handle = self._resolve(file)
        if handle.id in self._sessions:
            raise UploadInProgressError(handle.id)

        session = TransportSession(
            file=handle,
            url=url,
            transport=self._transport,
            settings=settings,
            profile=self._profile,
            sink=sink
        )
        self._sessions[handle.id] = session
        self._finished.pop(handle.id, None)

        task = asyncio.ensure_future(self._run(session))
        self._tasks[handle.id] = task
        return task

    async def upload_file(
        self,
        file: Union[FileHandle, str],
        url: str,
        settings: Optional[UploadSettings] = None,
        sink: Optional[EventSink] = None
    ) -> TransferState:
        """
        Upload a file and wait for the transfer to end.

        Returns:
            The terminal TransferState (DONE, FAILED or STOPPED)
        """
        return await self.start_upload(file, url, settings, sink)

    async def _run(self, session: TransportSession) -> TransferState:
        file_id = session.file.id
        try:
            return await session.run()
        finally:
            self._sessions.pop(file_id, None)
            self._tasks.pop(file_id, None)
            if file_id in self._forgotten:
                self._forgotten.discard(file_id)
            else:
                self._finished[file_id] = session.state

    def cancel(self, file_id: str) -> bool:
        """
        Cancel an upload.

        Idempotent: unknown or already finished ids are ignored.

        Returns:
            True if an active upload was stopped
        """
        session = self._sessions.get(file_id)
        if session is None:
            logger.debug(f"Cancel ignored, no active upload for {file_id}")
            return False
        return session.stop()

    def forget(self, file_id: str) -> bool:
        """
        Drop everything the coordinator keeps about a file.

        An active upload is stopped and its final state is not archived;
        a finished one has its archived state removed.

        Returns:
            True if there was anything to drop
        """
        if file_id in self._sessions:
            self._forgotten.add(file_id)
            self.cancel(file_id)
            return True
        return self._finished.pop(file_id, None) is not None

    def cancel_all(self) -> int:
        """Cancel every active upload; returns how many were stopped."""
        return sum(1 for file_id in list(self._sessions) if self.cancel(file_id))

    async def wait_all(self) -> List[TransferState]:
        """Wait for every running upload to end."""
        tasks = list(self._tasks.values())
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks))

    async def close(self) -> None:
        """Stop all uploads and close the transport."""
        self.cancel_all()
        await self.wait_all()
        await self._transport.close()
