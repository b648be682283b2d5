"""Tests for the capability profile."""
from unittest.mock import patch

from chunkload.core.upload import CapabilityProfile


class TestCapabilityProfile:
    """Test suite for CapabilityProfile."""

    def test_full(self):
        """Test full profile supports everything."""
        profile = CapabilityProfile.full()

        assert profile.can_slice_chunks
        assert profile.can_send_binary
        assert profile.can_report_progress
        assert profile.structured_multipart

    def test_minimal(self):
        """Test minimal profile supports nothing."""
        profile = CapabilityProfile.minimal()

        assert not any(vars(profile).values())
        assert not profile.structured_multipart

    def test_broken_blob_disables_structured(self):
        """Test broken blob support rules out structured multipart."""
        assert not CapabilityProfile(blob_in_multipart_broken=True).structured_multipart

    def test_detect_installed_aiohttp(self):
        """Test current aiohttp and aiofiles support every feature."""
        assert CapabilityProfile.detect() == CapabilityProfile.full()

    def test_detect_broken_form_data(self):
        """Test a FormData rejecting file parts is reported as broken."""

        class BrokenFormData:
            def add_field(self, *args, **kwargs):
                raise TypeError("no file parts")

        with patch('aiohttp.FormData', BrokenFormData):
            profile = CapabilityProfile.detect()

        assert profile.can_use_multipart
        assert profile.blob_in_multipart_broken
        assert not profile.structured_multipart
