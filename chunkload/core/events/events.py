"""Typed outbound events of the upload engine."""
from dataclasses import dataclass
from typing import Optional, Union

from ..exceptions import ErrorKind
from ..utils import percentage_of


@dataclass
class ChunkUploaded:
    """
    One chunk was accepted by the server.

    The receiver may set ``cancelled = True`` to stop the transfer; the
    session then fails the file and sends no further chunks.
    """
    file_id: str
    chunk_index: int
    total_chunks: int
    response_body: str
    status: int
    cancelled: bool = False


@dataclass(frozen=True)
class UploadProgress:
    """
    File level progress; ``bytes_loaded`` never exceeds ``file_size``.

    ``complete`` is set on the last progress event of a finished file.
    """
    file_id: str
    bytes_loaded: int
    file_size: int
    complete: bool = False

    @property
    def percentage(self) -> float:
        return percentage_of(self.bytes_loaded, self.file_size, self.complete)


@dataclass(frozen=True)
class FileUploaded:
    """Terminal success with the last server response."""
    file_id: str
    response_body: str
    status: int


@dataclass(frozen=True)
class UploadError:
    """Terminal failure of a file."""
    file_id: str
    kind: ErrorKind
    message: str
    status: Optional[int] = None

    @property
    def code(self) -> int:
        return int(self.kind)


UploadEvent = Union[ChunkUploaded, UploadProgress, FileUploaded, UploadError]
