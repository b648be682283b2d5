"""
File registry.

Explicit ownership map from generated file ids to file handles. A registry
belongs to whoever orchestrates the uploads; there is no process-wide table.
"""
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from ..models import FileHandle
from .file_service import FileValidator
from ...exceptions import UnknownFileError
from ...utils import guid

logger = logging.getLogger('chunkload.upload.registry')

PathLike = Union[str, Path]


class FileRegistry:
    """
    Maps file ids to handles.

    Example:
        >>> registry = FileRegistry()
        >>> handle = registry.add("report.pdf")
        >>> registry.get(handle.id) is handle
        True
    """

    def __init__(self, validator: Optional[FileValidator] = None):
        self._validator = validator or FileValidator()
        self._files: Dict[str, FileHandle] = {}

    def add(self, file_path: PathLike, target_name: Optional[str] = None) -> FileHandle:
        """
        Register one file.

        Args:
            file_path: Local file
            target_name: Name to use on the server instead of the file name

        Returns:
            The new handle

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path, size = self._validator.validate(file_path)
        handle = FileHandle(
            id=guid(),
            name=path.name,
            size=size,
            path=path,
            target_name=target_name
        )
        self._files[handle.id] = handle
        logger.debug(f"Registered {handle.name} ({size} bytes) as {handle.id}")
        return handle

    def add_many(self, file_paths: Iterable[PathLike]) -> List[FileHandle]:
        """
        Register several files; a name already seen in this batch is skipped.
        """
        seen = set()
        handles = []
        for file_path in file_paths:
            name = Path(file_path).name
            if name in seen:
                logger.debug(f"Skipping duplicate file name in batch: {name}")
                continue
            seen.add(name)
            handles.append(self.add(file_path))
        return handles

    def get(self, file_id: str) -> FileHandle:
        try:
            return self._files[file_id]
        except KeyError:
            raise UnknownFileError(file_id) from None

    def remove(self, file_id: str) -> FileHandle:
        try:
            return self._files.pop(file_id)
        except KeyError:
            raise UnknownFileError(file_id) from None

    def clear(self) -> None:
        self._files.clear()

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._files

    def __iter__(self) -> Iterator[FileHandle]:
        return iter(list(self._files.values()))

    def __len__(self) -> int:
        return len(self._files)
