"""Pytest fixtures for chunkload tests."""
from pathlib import Path

import pytest

from chunkload.core.upload import FileHandle, FileRegistry
from fakes import FakeTransport, RecordingSink


def make_file(directory: Path, size: int, name: str = "data.bin") -> FileHandle:
    """Write ``size`` patterned bytes and register the file."""
    path = directory / name
    path.write_bytes(bytes(i % 251 for i in range(size)))
    return FileRegistry().add(path)


@pytest.fixture
def transport():
    """Fake transport answering 200 to everything."""
    return FakeTransport()


@pytest.fixture
def sink():
    """Recording event sink."""
    return RecordingSink()


@pytest.fixture
def file_factory(tmp_path):
    """Creates registered files of a given size."""
    def factory(size: int, name: str = "data.bin") -> FileHandle:
        return make_file(tmp_path, size, name)
    return factory

