"""
Transport session.

Drives one file through its chunk plan: read chunk, encode, send, classify
the response, then advance, finish, or fail. Exactly one request per file
is in flight, and chunk k+1 is only read once chunk k was accepted.
"""
import asyncio
import logging
import time
from functools import partial
from typing import Optional

from .capabilities import CapabilityProfile
from .models import ChunkInfo, FileHandle, TransferState, TransferStatus, UploadSettings
from .progress import ProgressReporter
from .protocols import FileReaderProtocol, TransportProtocol
from .services import AsyncFileReader, TransportResponse
from .strategies import RequestEncoder, plan
from ..events import (
    BaseEventSink,
    ChunkUploaded,
    EventSink,
    FileUploaded,
    UploadError,
    UploadEvent,
    dispatch,
)
from ..exceptions import ChunkloadException, ErrorKind, UploadHTTPError

logger = logging.getLogger('chunkload.upload.session')


class TransportSession:
    """
    State machine of one file's transfer.

    ``run()`` never raises for upload failures or failing event handlers:
    every failure ends in a terminal ``TransferState`` and one ``UploadError``
    event. ``stop()`` may be called at any time, including from inside an
    event handler; after it the session emits nothing.
    """

    def __init__(
        self,
        file: FileHandle,
        url: str,
        transport: TransportProtocol,
        settings: Optional[UploadSettings] = None,
        profile: Optional[CapabilityProfile] = None,
        sink: Optional[EventSink] = None,
        reader: Optional[FileReaderProtocol] = None
    ):
        """
        Initialize the session.

        Args:
            file: File to upload
            url: Upload endpoint
            transport: Transport used to send requests
            settings: Upload settings
            profile: Transport capabilities
            sink: Receiver of this file's events
            reader: Chunk reader; defaults to an aiofiles reader on ``file.path``
        """
        self._file = file
        self._url = url
        self._transport = transport
        self._settings = settings or UploadSettings()
        self._profile = profile or CapabilityProfile.full()
        self._sink = sink or BaseEventSink()
        self._reader = reader or AsyncFileReader(file.path)

        self._plan = plan(file.size, self._settings.chunk_size, self._profile)
        self._encoder = RequestEncoder(self._profile, self._settings)
        self._progress = ProgressReporter(file.id, file.size)
        self._inflight: Optional[asyncio.Future] = None
        self._stopped = False

        self.state = TransferState(
            file_id=file.id,
            file_size=file.size,
            total_chunks=self._plan.total_chunks
        )

    @property
    def file(self) -> FileHandle:
        return self._file

    @property
    def chunk_plan(self):
        return self._plan

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> bool:
        """
        Stop the transfer and abort the in-flight request.

        Returns:
            True if the session was active, False if it had already ended
        """
        if self._stopped or self.state.is_terminal:
            return False

        self._stopped = True
        self.state.status = TransferStatus.STOPPED
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        logger.warning(f"Upload of {self._file.name} ({self._file.id}) stopped at chunk {self.state.current_chunk}")
        return True

    async def run(self) -> TransferState:
        """
        Upload the file.

        Returns:
            The terminal transfer state
        """
        if self._stopped:
            return self.state
        if self.state.status is not TransferStatus.QUEUED:
            raise RuntimeError(f"Session for {self._file.id} already started")

        size_mb = self._file.size / (1024 * 1024)
        logger.info(
            f"Starting upload: {self._file.name} ({size_mb:.2f} MB) in "
            f"{self._plan.total_chunks} chunk(s) as {self._encoder.strategy.value}"
        )
        upload_start = time.time()

        try:
            await self._reader.open()
            for chunk in self._plan.chunks():
                if self._stopped or not await self._upload_chunk(chunk):
                    break
        except asyncio.CancelledError:
            if not self._stopped:
                self.stop()
                raise
        except (ChunkloadException, OSError) as e:
            if not self._stopped:
                self._fail(ErrorKind.IO_ERROR, str(e))
        except Exception as e:
            # Raised by an event handler; the transfer still ends in a terminal state.
            logger.exception(f"Event handler failed during upload of {self._file.name}")
            if not self._stopped and not self.state.is_terminal:
                self._fail(ErrorKind.GENERIC_ERROR, f"Event handler failed: {e}")
        finally:
            self._inflight = None
            await self._reader.close()

        elapsed = time.time() - upload_start
        logger.info(f"Upload of {self._file.name} finished as {self.state.status.value} in {elapsed:.2f}s")
        return self.state

    async def _upload_chunk(self, chunk: ChunkInfo) -> bool:
        """Send one chunk; returns True when the next chunk should follow."""
        self.state.current_chunk = chunk.index
        self.state.status = TransferStatus.UPLOADING

        self._inflight = asyncio.ensure_future(self._transfer(chunk))
        try:
            response = await self._inflight
        except asyncio.CancelledError:
            if self._stopped:
                return False
            raise
        finally:
            self._inflight = None

        # A response to an aborted request is dropped.
        if self._stopped:
            return False

        self.state.response_status = response.status
        if response.status >= 400:
            error = UploadHTTPError(response.status)
            self._fail(error.kind, str(error), status=error.status)
            return False

        self.state.status = TransferStatus.CHUNK_SUCCEEDED
        self.state.response_body = response.body
        return self._advance(chunk, response)

    async def _transfer(self, chunk: ChunkInfo) -> TransportResponse:
        data = await self._reader.read_chunk(chunk.start, chunk.end)
        request = self._encoder.encode(self._url, data, chunk.index, self._plan, self._file)
        del data

        on_progress = None
        if self._profile.can_report_progress:
            on_progress = partial(self._on_wire_progress, request, chunk.start)

        logger.debug(f"Sending chunk {chunk.index + 1}/{self._plan.total_chunks} of {self._file.id} ({chunk.size} bytes)")
        return await self._transport.send(request, on_progress)

    def _on_wire_progress(self, request, prior: int, wire_bytes: int) -> None:
        if self._stopped:
            return
        loaded = prior + request.payload_bytes_sent(wire_bytes)
        if self._progress.advance(loaded):
            self._report_progress()

    def _advance(self, chunk: ChunkInfo, response: TransportResponse) -> bool:
        if self._plan.is_chunked:
            event = ChunkUploaded(
                file_id=self._file.id,
                chunk_index=chunk.index,
                total_chunks=self._plan.total_chunks,
                response_body=response.body,
                status=response.status
            )
            self._emit(event)
            if self._stopped:
                return False
            if event.cancelled:
                logger.warning(f"Upload of {self._file.name} cancelled by handler after chunk {chunk.index}")
                self.state.status = TransferStatus.FAILED
                return False
            loaded = min(self._file.size, (chunk.index + 1) * self._plan.chunk_size)
        else:
            loaded = self._file.size

        is_last = chunk.index + 1 >= self._plan.total_chunks
        if is_last:
            self._progress.finish()
        else:
            self._progress.advance(loaded)
        self._report_progress()
        if self._stopped:
            return False

        if is_last:
            self.state.status = TransferStatus.DONE
            self._emit(FileUploaded(
                file_id=self._file.id,
                response_body=response.body,
                status=response.status
            ))
            return False

        return True

    def _report_progress(self) -> None:
        self.state.bytes_loaded = self._progress.bytes_loaded
        self._emit(self._progress.snapshot())

    def _fail(self, kind: ErrorKind, message: str, status: Optional[int] = None) -> None:
        logger.error(
            f"Upload of {self._file.name} failed at chunk {self.state.current_chunk + 1}/{self._plan.total_chunks}: {message}"
        )
        error = UploadError(file_id=self._file.id, kind=kind, message=message, status=status)
        self.state.status = TransferStatus.FAILED
        self.state.last_error = error
        try:
            self._emit(error)
        except Exception:
            logger.exception(f"Error handler failed for {self._file.name}")

    def _emit(self, event: UploadEvent) -> None:
        if self._stopped:
            return
        dispatch(self._sink, event)
