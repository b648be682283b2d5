"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures. Only
``TransferState`` is mutable: it is the per-file record the transport
session updates as the transfer moves through its states.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, Iterator, Tuple, Union, TYPE_CHECKING

from ...utils import percentage_of

if TYPE_CHECKING:
    import aiohttp
    from ...events import UploadError


@dataclass(frozen=True)
class FileHandle:
    """
    Reference to a local file ready to be uploaded.

    Attributes:
        id: Process-unique file id
        name: Original file name
        size: File size in bytes, fixed at creation
        path: Location of the file on disk
        target_name: Optional name to use on the server instead of ``name``

    Example:
        >>> handle = FileHandle(id="p1", name="a.txt", size=3, path=Path("a.txt"))
        >>> handle.upload_name
        'a.txt'
    """
    id: str
    name: str
    size: int
    path: Path
    target_name: Optional[str] = None

    def __post_init__(self):
        if self.size < 0:
            raise ValueError(f"File size must be non-negative, got {self.size}")
        if isinstance(self.path, str):
            object.__setattr__(self, 'path', Path(self.path))

    @property
    def upload_name(self) -> str:
        """Name sent to the server."""
        return self.target_name or self.name


@dataclass(frozen=True)
class ChunkInfo:
    """
    Information about a file chunk.

    Attributes:
        index: Chunk index
        start: Start position in bytes
        end: End position in bytes (exclusive)
    """
    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        """Returns chunk size."""
        return self.end - self.start


@dataclass(frozen=True)
class ChunkPlan:
    """
    Ordered byte ranges of one file.

    ``chunk_size`` equals ``file_size`` for the degenerate single-request
    plan. Ranges are contiguous, non-overlapping and cover the whole file.
    """
    file_size: int
    chunk_size: int
    total_chunks: int

    def __post_init__(self):
        if self.file_size < 0:
            raise ValueError("file_size must be non-negative")
        if self.total_chunks < 1:
            raise ValueError("total_chunks must be at least 1")

    @property
    def is_chunked(self) -> bool:
        """True when the file is sent as more than one request."""
        return self.total_chunks > 1

    def range_of(self, index: int) -> Tuple[int, int]:
        """Returns the ``(start, end)`` byte range of a chunk."""
        if not 0 <= index < self.total_chunks:
            raise IndexError(f"Chunk index {index} out of range (0..{self.total_chunks - 1})")
        start = index * self.chunk_size
        end = min(start + self.chunk_size, self.file_size)
        return start, end

    def chunk(self, index: int) -> ChunkInfo:
        start, end = self.range_of(index)
        return ChunkInfo(index=index, start=start, end=end)

    def chunks(self) -> Iterator[ChunkInfo]:
        for index in range(self.total_chunks):
            yield self.chunk(index)

    def ranges(self):
        return [self.range_of(index) for index in range(self.total_chunks)]


class TransferStatus(str, Enum):
    """Lifecycle of one file's transfer."""
    QUEUED = 'queued'
    UPLOADING = 'uploading'
    CHUNK_SUCCEEDED = 'chunk_succeeded'
    DONE = 'done'
    FAILED = 'failed'
    STOPPED = 'stopped'

    @property
    def is_terminal(self) -> bool:
        return self in (TransferStatus.DONE, TransferStatus.FAILED, TransferStatus.STOPPED)


@dataclass
class TransferState:
    """
    Mutable per-file transfer record.

    Attributes:
        file_id: Id of the file being transferred
        file_size: Total file size
        status: Current transfer status
        current_chunk: Index of the chunk being sent (0-based)
        total_chunks: Number of chunks in the plan
        bytes_loaded: Bytes confirmed or in flight, clamped to file_size
        last_error: Error event of a failed transfer
        response_body: Raw body of the last successful response
        response_status: HTTP status of the last response
    """
    file_id: str
    file_size: int
    status: TransferStatus = TransferStatus.QUEUED
    current_chunk: int = 0
    total_chunks: int = 1
    bytes_loaded: int = 0
    last_error: Optional['UploadError'] = None
    response_body: Optional[str] = None
    response_status: Optional[int] = None

    @property
    def percentage(self) -> float:
        """Returns upload progress as percentage."""
        return percentage_of(self.bytes_loaded, self.file_size, self.status == TransferStatus.DONE)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass
class UploadSettings:
    """
    Per-upload configuration.

    Attributes:
        chunk_size: Chunk size in bytes; 0 or less sends the whole file at once
        multipart: Send the file as multipart/form-data when possible
        multipart_fixed_fields: Form fields sent with every request of the uploader
        multipart_params_extra: Extra form fields for this upload, override fixed ones
        file_field_name: Form field name of the file part
        headers: Extra request headers
    """
    chunk_size: int = 0
    multipart: bool = True
    multipart_fixed_fields: Dict[str, Any] = field(default_factory=dict)
    multipart_params_extra: Dict[str, Any] = field(default_factory=dict)
    file_field_name: str = 'file'
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.file_field_name:
            raise ValueError("file_field_name must not be empty")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadSettings':
        """Create from dictionary; accepts the short legacy key names as well."""
        return cls(
            chunk_size=int(data.get('chunk_size', 0) or 0),
            multipart=bool(data.get('multipart', True)),
            multipart_fixed_fields=dict(
                data.get('multipart_fixed_fields', data.get('multipart_params', {})) or {}
            ),
            multipart_params_extra=dict(data.get('multipart_params_extra', {}) or {}),
            file_field_name=data.get('file_field_name', data.get('file_data_name', 'file')),
            headers=dict(data.get('headers', {}) or {}),
        )


class EncodingStrategy(str, Enum):
    """Wire format chosen for one request."""
    STRUCTURED = 'structured'
    MULTIPART_TEXT = 'multipart_text'
    OCTET_STREAM = 'octet_stream'


@dataclass(frozen=True)
class EncodedRequest:
    """
    One ready-to-send request.

    Attributes:
        url: Target URL, including query args for octet streams
        body: Raw bytes or an ``aiohttp.FormData``
        headers: Request headers
        query_args: Values moved into the query string
        strategy: Encoding strategy used
        payload_size: Length of the chunk data inside the body
        payload_offset: Bytes of framing before the chunk data
        overhead: Total framing bytes (body length minus payload)
    """
    url: str
    body: Union[bytes, 'aiohttp.FormData']
    headers: Dict[str, str]
    strategy: EncodingStrategy
    payload_size: int
    query_args: Dict[str, Any] = field(default_factory=dict)
    payload_offset: int = 0
    overhead: int = 0

    @property
    def content_length(self) -> Optional[int]:
        """Body length when known up front."""
        if isinstance(self.body, (bytes, bytearray, memoryview)):
            return len(self.body)
        return None

    def payload_bytes_sent(self, wire_bytes: int) -> int:
        """Converts wire bytes sent into chunk payload bytes sent."""
        return max(0, min(self.payload_size, wire_bytes - self.payload_offset))
