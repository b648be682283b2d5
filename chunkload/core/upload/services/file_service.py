"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Tuple, Optional, Union
import logging
import aiofiles

from ...exceptions import FileReadError


class FileValidator:
    """
    Validates files before they are registered for upload.

    Responsibilities:
    - Check file existence
    - Verify file is not a directory
    - Get file size
    """

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (validated Path, file size in bytes)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")

        return path, path.stat().st_size


class AsyncFileReader:
    """
    Asynchronous chunk reader for one file.

    Uses aiofiles for non-blocking I/O. Every chunk is read into an
    addressable ``bytes`` buffer; a read is an awaitable step, so cancelling
    the task that awaits it abandons the read.
    """

    def __init__(self, file_path: Union[str, Path]):
        self._file_path = Path(file_path)
        self._logger = logging.getLogger('chunkload.upload.file')
        self._file_handle: Optional[aiofiles.threadpool.binary.AsyncBufferedReader] = None

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def is_open(self) -> bool:
        return self._file_handle is not None

    async def open(self) -> None:
        """Open the file; reads reuse the handle until ``close()``."""
        if self._file_handle is not None:
            return
        try:
            self._file_handle = await aiofiles.open(self._file_path, 'rb')
        except OSError as e:
            raise FileReadError(f"Cannot open {self._file_path}: {e}") from e

    async def close(self) -> None:
        """Close the file if open."""
        if self._file_handle is not None:
            await self._file_handle.close()
            self._file_handle = None

    async def __aenter__(self) -> 'AsyncFileReader':
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def read_chunk(self, start: int, end: int) -> bytes:
        """
        Read the byte range ``[start, end)``.

        Args:
            start: Start position in bytes
            end: End position in bytes (exclusive)

        Returns:
            Chunk data, exactly ``end - start`` bytes

        Raises:
            FileReadError: If the file cannot be read or is shorter than expected
        """
        size = end - start
        if size < 0:
            raise ValueError(f"Invalid range {start}-{end}")
        if size == 0:
            return b''

        try:
            if self._file_handle is not None:
                await self._file_handle.seek(start)
                data = await self._file_handle.read(size)
            else:
                async with aiofiles.open(self._file_path, 'rb') as f:
                    await f.seek(start)
                    data = await f.read(size)
        except OSError as e:
            self._logger.error(f"Failed to read chunk {start}-{end} of {self._file_path}: {e}")
            raise FileReadError(f"Failed to read {self._file_path}: {e}", start, end) from e

        if len(data) != size:
            raise FileReadError(
                f"Short read from {self._file_path}: expected {size} bytes at {start}, got {len(data)}",
                start,
                end
            )

        self._logger.debug(f"Read chunk: {start}-{end} ({len(data)} bytes)")
        return data
