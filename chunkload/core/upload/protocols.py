"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection, so the session can
run against a real HTTP transport or an in-memory one.
"""
from typing import Protocol, Optional, Callable, TYPE_CHECKING, runtime_checkable

from .models import EncodedRequest

if TYPE_CHECKING:
    from .services.transport import TransportResponse


class FileReaderProtocol(Protocol):
    """Protocol for chunk reading."""

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def read_chunk(self, start: int, end: int) -> bytes:
        """
        Read a byte range of the file.

        Raises:
            FileReadError: If the range cannot be read
        """
        ...


@runtime_checkable
class TransportProtocol(Protocol):
    """Protocol for sending one encoded request."""

    async def send(
        self,
        request: EncodedRequest,
        on_progress: Optional[Callable[[int], None]] = None
    ) -> 'TransportResponse':
        """
        Send a request and return the raw response.

        Args:
            request: Encoded request
            on_progress: Called with cumulative wire bytes sent

        Raises:
            TransportError: On network failure
        """
        ...

    async def close(self) -> None: ...
