"""
Custom exceptions and error codes for chunkload.

The transport session never lets these escape ``run()``: each one is turned
into a terminal state plus an ``UploadError`` event. They are raised freely
by the lower layers (file reader, transport, registry).
"""
from enum import IntEnum
from typing import Optional, Dict


class ErrorKind(IntEnum):
    """Numeric error codes reported in ``UploadError`` events."""

    GENERIC_ERROR = -100
    HTTP_ERROR = -200
    IO_ERROR = -300

    @property
    def message(self) -> str:
        """Human readable message for the error kind."""
        return ERROR_MESSAGES[self]


ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.GENERIC_ERROR: 'Generic error.',
    ErrorKind.HTTP_ERROR: 'HTTP Error.',
    ErrorKind.IO_ERROR: 'IO error.',
}


class ChunkloadException(Exception):
    """Base exception for all chunkload errors."""

    kind = ErrorKind.GENERIC_ERROR

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (defaults to the kind's code)
        """
        self.error_code = error_code if error_code is not None else int(self.kind)
        super().__init__(message)


class UploadHTTPError(ChunkloadException):
    """Server answered a chunk request with status >= 400."""

    kind = ErrorKind.HTTP_ERROR

    def __init__(self, status: int, message: Optional[str] = None) -> None:
        self.status = status
        super().__init__(message or f"{ErrorKind.HTTP_ERROR.message} ({status})")


class TransportError(ChunkloadException):
    """Network level failure while sending a request."""

    kind = ErrorKind.IO_ERROR


class FileReadError(ChunkloadException):
    """A chunk could not be read from the local file."""

    kind = ErrorKind.IO_ERROR

    def __init__(
        self,
        message: str,
        start: Optional[int] = None,
        end: Optional[int] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            start: Start offset of the failed read
            end: End offset of the failed read
        """
        self.start = start
        self.end = end
        super().__init__(message)


class UnknownFileError(ChunkloadException, KeyError):
    """No file is registered under the given id."""

    def __init__(self, file_id: str) -> None:
        self.file_id = file_id
        super().__init__(f"Unknown file id: {file_id}")

    def __str__(self) -> str:
        return self.args[0]


class UploadInProgressError(ChunkloadException):
    """An upload for this file id is already running."""

    def __init__(self, file_id: str) -> None:
        self.file_id = file_id
        super().__init__(f"Upload already in progress for file {file_id}")
