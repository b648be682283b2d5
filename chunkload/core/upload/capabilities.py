"""
Transport capability profile.

Probed once, before any upload starts, and shared read-only by every
session. Downstream code branches on these flags and never probes again.
"""
import logging
from dataclasses import dataclass

import aiofiles.threadpool.binary
import aiohttp

logger = logging.getLogger('chunkload.upload.capabilities')


@dataclass(frozen=True)
class CapabilityProfile:
    """
    What the transport can do.

    Attributes:
        can_slice_chunks: Files can be read at arbitrary offsets
        can_send_binary: Raw byte bodies can be sent
        can_use_multipart: Structured multipart bodies can be built
        can_report_progress: Bytes-sent progress is available while a request is in flight
        blob_in_multipart_broken: File data cannot be attached to a structured
            multipart body; multipart must be hand-built instead
    """
    can_slice_chunks: bool = True
    can_send_binary: bool = True
    can_use_multipart: bool = True
    can_report_progress: bool = True
    blob_in_multipart_broken: bool = False

    @property
    def structured_multipart(self) -> bool:
        """True when file data can go into a structured multipart body."""
        return self.can_use_multipart and not self.blob_in_multipart_broken

    @classmethod
    def full(cls) -> 'CapabilityProfile':
        """Everything supported."""
        return cls()

    @classmethod
    def minimal(cls) -> 'CapabilityProfile':
        """Nothing but a plain single request."""
        return cls(
            can_slice_chunks=False,
            can_send_binary=False,
            can_use_multipart=False,
            can_report_progress=False,
            blob_in_multipart_broken=False,
        )

    @classmethod
    def detect(cls) -> 'CapabilityProfile':
        """
        Probe the installed transport.

        Returns:
            Profile describing aiohttp and the local file layer. A missing
            feature is reported as False, never raised.
        """
        payload = getattr(aiohttp, 'payload', None)
        can_send_binary = payload is not None and hasattr(payload, 'BytesPayload')
        can_report_progress = payload is not None and hasattr(payload, 'AsyncIterablePayload')

        form_data = getattr(aiohttp, 'FormData', None)
        can_use_multipart = form_data is not None
        blob_in_multipart_broken = False
        if can_use_multipart:
            try:
                probe = form_data()
                probe.add_field('probe', b'', filename='probe', content_type='application/octet-stream')
            except (TypeError, ValueError):
                blob_in_multipart_broken = True

        can_slice_chunks = hasattr(aiofiles.threadpool.binary.AsyncBufferedReader, 'seek')

        profile = cls(
            can_slice_chunks=can_slice_chunks,
            can_send_binary=can_send_binary,
            can_use_multipart=can_use_multipart,
            can_report_progress=can_report_progress,
            blob_in_multipart_broken=blob_in_multipart_broken,
        )
        logger.debug(f"Detected capabilities: {profile}")
        return profile
