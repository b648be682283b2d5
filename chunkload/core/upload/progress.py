"""Per-file progress aggregation."""
from ..events import UploadProgress
from ..utils import percentage_of


class ProgressReporter:
    """
    Monotonic byte counter of one file.

    Values are clamped to ``[0, file_size]`` and never move backwards, so
    late or approximate updates can be fed in without checks at the call
    site.
    """

    def __init__(self, file_id: str, file_size: int):
        if file_size < 0:
            raise ValueError("file_size must be non-negative")
        self._file_id = file_id
        self._file_size = file_size
        self._bytes_loaded = 0
        self._complete = False

    @property
    def bytes_loaded(self) -> int:
        return self._bytes_loaded

    @property
    def file_size(self) -> int:
        return self._file_size

    @property
    def complete(self) -> bool:
        return self._complete

    @property
    def percentage(self) -> float:
        """Returns progress as percentage."""
        return percentage_of(self._bytes_loaded, self._file_size, self._complete)

    def advance(self, value: int) -> bool:
        """
        Move the counter to ``value``.

        Returns:
            True if the reported value changed
        """
        clamped = max(0, min(self._file_size, value))
        if clamped <= self._bytes_loaded:
            return False
        self._bytes_loaded = clamped
        return True

    def finish(self) -> None:
        """Mark the file as fully transferred."""
        self._bytes_loaded = self._file_size
        self._complete = True

    def snapshot(self) -> UploadProgress:
        """Current value as an event."""
        return UploadProgress(
            file_id=self._file_id,
            bytes_loaded=self._bytes_loaded,
            file_size=self._file_size,
            complete=self._complete
        )
