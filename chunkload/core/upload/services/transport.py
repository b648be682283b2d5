"""
HTTP transport service.

Sends encoded chunk requests with aiohttp and hands back the raw response.
Status classification is left to the transport session.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

import aiohttp

from ..models import EncodedRequest
from ...config import TransportConfig
from ...exceptions import TransportError

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class TransportResponse:
    """Raw server response of one request."""
    status: int
    body: str


async def _stream_body(
    body: bytes,
    slice_size: int,
    on_progress: ProgressCallback
) -> AsyncIterator[bytes]:
    """Yield body slices, reporting cumulative bytes handed to the socket."""
    sent = 0
    for offset in range(0, len(body), slice_size):
        piece = body[offset:offset + slice_size]
        yield piece
        sent += len(piece)
        on_progress(sent)
        await asyncio.sleep(0)


class AiohttpTransport:
    """
    Sends requests over an aiohttp session.

    Reuses one HTTP session for all requests. The session is created lazily
    unless one is injected; an injected session is never closed here.

    Responsibilities:
    - POST encoded bodies
    - Report bytes sent while the body streams out
    - Map network failures to ``TransportError``
    """

    def __init__(
        self,
        config: Optional[TransportConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the transport.

        Args:
            config: Transport configuration
            session: Optional shared session (RECOMMENDED when uploading many files)
        """
        self._config = config or TransportConfig.default()
        self._session = session
        self._owns_session = False
        self._logger = logging.getLogger('chunkload.upload.transport')

    @property
    def config(self) -> TransportConfig:
        return self._config

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(**self._config.get_connector_kwargs()),
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close session if we own it."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def send(
        self,
        request: EncodedRequest,
        on_progress: Optional[ProgressCallback] = None
    ) -> TransportResponse:
        """
        Send one request.

        Args:
            request: Encoded request
            on_progress: Called with cumulative wire bytes sent; only used
                for byte bodies

        Returns:
            TransportResponse with status and raw body text

        Raises:
            TransportError: On connection failures and timeouts
        """
        session = await self._get_session()
        headers = dict(request.headers)
        data = request.body

        if on_progress is not None and request.content_length is not None:
            headers['Content-Length'] = str(request.content_length)
            data = _stream_body(bytes(request.body), self._config.progress_slice_size, on_progress)

        proxy = self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None
        size_kb = request.payload_size / 1024
        upload_start = time.time()
        self._logger.debug(f"POST {request.url} ({request.strategy.value}, {size_kb:.1f} KB)")

        try:
            async with session.post(
                request.url,
                data=data,
                headers=headers,
                proxy=proxy
            ) as response:
                body = await response.text(errors='replace')
                elapsed = time.time() - upload_start
                speed_kbps = (size_kb / elapsed) if elapsed > 0 else 0
                self._logger.debug(
                    f"HTTP {response.status} from {request.url} in {elapsed:.2f}s ({speed_kbps:.1f} KB/s)"
                )
                return TransportResponse(status=response.status, body=body)
        except asyncio.TimeoutError as e:
            elapsed = time.time() - upload_start
            self._logger.error(f"Request to {request.url} timed out after {elapsed:.2f}s")
            raise TransportError(f"Request timed out after {elapsed:.2f}s") from e
        except aiohttp.ClientError as e:
            elapsed = time.time() - upload_start
            self._logger.error(f"Request to {request.url} failed after {elapsed:.2f}s: {e}")
            raise TransportError(f"Request failed: {e}") from e
