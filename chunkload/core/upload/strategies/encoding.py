"""
Request encoding strategies.

Picks the wire format of one chunk request from the caller's settings and
the transport capabilities, first match wins:

1. structured multipart (``aiohttp.FormData``)
2. hand-built multipart/form-data body (RFC 2388 framing around raw bytes)
3. raw ``application/octet-stream`` body, form values in the query string
"""
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..capabilities import CapabilityProfile
from ..models import (
    ChunkPlan,
    EncodedRequest,
    EncodingStrategy,
    FileHandle,
    UploadSettings,
)
from ...utils import build_url, guid, mime_type_for

logger = logging.getLogger('chunkload.upload.encoding')

CRLF = '\r\n'
BOUNDARY_PREFIX = '----chunkloadboundary'
OCTET_STREAM = 'application/octet-stream'


def _quote_header_value(value: str) -> str:
    return value.replace('\r', '%0D').replace('\n', '%0A').replace('"', '%22')


def new_boundary() -> str:
    return BOUNDARY_PREFIX + guid()


class RequestEncoder:
    """
    Serializes chunks into requests.

    One encoder serves one file upload; it holds no per-chunk state.
    """

    def __init__(self, profile: CapabilityProfile, settings: UploadSettings):
        self._profile = profile
        self._settings = settings

    @property
    def strategy(self) -> EncodingStrategy:
        """Strategy used for every request of this upload."""
        if self._settings.multipart:
            if self._profile.structured_multipart:
                return EncodingStrategy.STRUCTURED
            if self._profile.can_send_binary:
                return EncodingStrategy.MULTIPART_TEXT
        return EncodingStrategy.OCTET_STREAM

    def form_fields(self, file: FileHandle, chunk_index: int, chunk_plan: ChunkPlan) -> Dict[str, Any]:
        """
        Form values of one request.

        Order: ``name``, then ``chunk``/``chunks`` when chunked, then the
        fixed fields, then the per-upload extras (later keys win).
        """
        fields: Dict[str, Any] = {'name': file.upload_name}
        if chunk_plan.is_chunked:
            fields['chunk'] = chunk_index
            fields['chunks'] = chunk_plan.total_chunks
        fields.update(self._settings.multipart_fixed_fields)
        fields.update(self._settings.multipart_params_extra)
        return fields

    def encode(
        self,
        url: str,
        chunk: bytes,
        chunk_index: int,
        chunk_plan: ChunkPlan,
        file: FileHandle,
        boundary: Optional[str] = None
    ) -> EncodedRequest:
        """
        Encode one chunk.

        Args:
            url: Upload endpoint
            chunk: Chunk bytes
            chunk_index: Index of the chunk in the plan
            chunk_plan: Plan of the file
            file: File being uploaded
            boundary: Multipart boundary; generated when omitted

        Returns:
            EncodedRequest ready for the transport
        """
        fields = self.form_fields(file, chunk_index, chunk_plan)
        strategy = self.strategy

        if strategy is EncodingStrategy.STRUCTURED:
            request = self._encode_structured(url, chunk, file, fields)
        elif strategy is EncodingStrategy.MULTIPART_TEXT:
            request = self._encode_multipart_text(url, chunk, file, fields, boundary or new_boundary())
        else:
            request = self._encode_octet_stream(url, chunk, fields)

        logger.debug(
            f"Encoded chunk {chunk_index + 1}/{chunk_plan.total_chunks} of {file.id} "
            f"as {strategy.value} ({len(chunk)} bytes, overhead {request.overhead})"
        )
        return request

    def _headers(self, content_type: Optional[str]) -> Dict[str, str]:
        headers = {
            name: value for name, value in self._settings.headers.items()
            if name.lower() != 'content-type'
        }
        if content_type:
            headers['Content-Type'] = content_type
        return headers

    def _encode_structured(
        self,
        url: str,
        chunk: bytes,
        file: FileHandle,
        fields: Dict[str, Any]
    ) -> EncodedRequest:
        form = aiohttp.FormData()
        for name, value in fields.items():
            form.add_field(name, str(value))
        form.add_field(
            self._settings.file_field_name,
            chunk,
            filename=file.upload_name,
            content_type=mime_type_for(file.name)
        )
        return EncodedRequest(
            url=url,
            body=form,
            headers=self._headers(None),
            strategy=EncodingStrategy.STRUCTURED,
            payload_size=len(chunk),
        )

    def _encode_multipart_text(
        self,
        url: str,
        chunk: bytes,
        file: FileHandle,
        fields: Dict[str, Any],
        boundary: str
    ) -> EncodedRequest:
        parts = []
        for name, value in fields.items():
            parts.append(
                f'--{boundary}{CRLF}'
                f'Content-Disposition: form-data; name="{_quote_header_value(name)}"{CRLF}{CRLF}'
                f'{value}{CRLF}'
            )
        parts.append(
            f'--{boundary}{CRLF}'
            f'Content-Disposition: form-data; name="{_quote_header_value(self._settings.file_field_name)}"; '
            f'filename="{_quote_header_value(file.upload_name)}"{CRLF}'
            f'Content-Type: {mime_type_for(file.name)}{CRLF}{CRLF}'
        )
        prefix = ''.join(parts).encode('utf-8')
        suffix = f'{CRLF}--{boundary}--{CRLF}'.encode('utf-8')
        body = prefix + bytes(chunk) + suffix

        return EncodedRequest(
            url=url,
            body=body,
            headers=self._headers(f'multipart/form-data; boundary={boundary}'),
            strategy=EncodingStrategy.MULTIPART_TEXT,
            payload_size=len(chunk),
            payload_offset=len(prefix),
            overhead=len(body) - len(chunk),
        )

    def _encode_octet_stream(self, url: str, chunk: bytes, fields: Dict[str, Any]) -> EncodedRequest:
        return EncodedRequest(
            url=build_url(url, fields),
            body=bytes(chunk),
            headers=self._headers(OCTET_STREAM),
            strategy=EncodingStrategy.OCTET_STREAM,
            payload_size=len(chunk),
            query_args=dict(fields),
        )


def encode(
    chunk: bytes,
    chunk_index: int,
    chunk_plan: ChunkPlan,
    file: FileHandle,
    profile: CapabilityProfile,
    settings: UploadSettings,
    url: str,
    boundary: Optional[str] = None
) -> EncodedRequest:
    """Encode one chunk without keeping an encoder around."""
    return RequestEncoder(profile, settings).encode(url, chunk, chunk_index, chunk_plan, file, boundary)
