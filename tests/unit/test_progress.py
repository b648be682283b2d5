"""Tests for progress aggregation."""
import pytest

from chunkload.core.upload import ProgressReporter


class TestProgressReporter:
    """Test suite for ProgressReporter."""

    def test_advance(self):
        """Test forward moves are reported."""
        reporter = ProgressReporter("p1", 1000)

        assert reporter.advance(300) is True
        assert reporter.bytes_loaded == 300
        assert reporter.percentage == 30.0

    def test_never_backwards(self):
        """Test lower values are ignored."""
        reporter = ProgressReporter("p1", 1000)
        reporter.advance(600)

        assert reporter.advance(450) is False
        assert reporter.advance(600) is False
        assert reporter.bytes_loaded == 600

    def test_clamped_to_size(self):
        """Test values beyond the file size are clamped."""
        reporter = ProgressReporter("p1", 1000)

        reporter.advance(1500)

        assert reporter.bytes_loaded == 1000
        assert reporter.advance(2000) is False

    def test_negative_ignored(self):
        """Test negative values never move the counter."""
        reporter = ProgressReporter("p1", 1000)

        assert reporter.advance(-5) is False
        assert reporter.bytes_loaded == 0

    def test_snapshot(self):
        """Test snapshot carries the current value."""
        reporter = ProgressReporter("p1", 1000)
        reporter.advance(250)

        event = reporter.snapshot()

        assert event.file_id == "p1"
        assert event.bytes_loaded == 250
        assert event.file_size == 1000

    def test_empty_file(self):
        """Test empty file reporter."""
        reporter = ProgressReporter("p1", 0)

        assert reporter.advance(10) is False
        assert reporter.percentage == 0.0
        assert reporter.snapshot().percentage == 0.0

    def test_finish(self):
        """Test finish completes the counter and its snapshot."""
        reporter = ProgressReporter("p1", 1000)
        reporter.advance(400)

        reporter.finish()

        assert reporter.bytes_loaded == 1000
        assert reporter.complete
        assert reporter.snapshot().complete

    def test_empty_file_finish(self):
        """Test an empty file reads 100 percent only once finished."""
        reporter = ProgressReporter("p1", 0)

        reporter.finish()

        assert reporter.percentage == 100.0
        assert reporter.snapshot().percentage == reporter.percentage

    def test_negative_size(self):
        """Test negative size raises."""
        with pytest.raises(ValueError):
            ProgressReporter("p1", -1)
