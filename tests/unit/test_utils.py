"""Tests for utility helpers."""
import pytest

from chunkload.core.utils import build_url, guid, mime_type_for, percentage_of, to_base32


class TestToBase32:
    """Test suite for to_base32."""

    @pytest.mark.parametrize("value,expected", [
        (0, '0'),
        (9, '9'),
        (10, 'a'),
        (31, 'v'),
        (32, '10'),
        (1023, 'vv'),
    ])
    def test_values(self, value, expected):
        """Test digit mapping."""
        assert to_base32(value) == expected

    def test_negative(self):
        """Test negative values raise."""
        with pytest.raises(ValueError):
            to_base32(-1)


class TestGuid:
    """Test suite for guid."""

    def test_unique(self):
        """Test ids do not repeat."""
        ids = {guid() for _ in range(1000)}

        assert len(ids) == 1000

    def test_prefix(self):
        """Test prefix and alphabet."""
        value = guid('f')

        assert value.startswith('f')
        assert set(value[1:]) <= set('0123456789abcdefghijklmnopqrstuv')


class TestBuildUrl:
    """Test suite for build_url."""

    def test_no_items(self):
        """Test URL is unchanged without items."""
        assert build_url("http://h/u", {}) == "http://h/u"

    def test_appends_query(self):
        """Test items are encoded after '?'."""
        assert build_url("http://h/u", {'name': 'a b.txt', 'chunk': 1}) == "http://h/u?name=a%20b.txt&chunk=1"

    def test_existing_query(self):
        """Test items are joined with '&' when a query exists."""
        assert build_url("http://h/u?x=1", {'y': '&'}) == "http://h/u?x=1&y=%26"


class TestMimeTypeFor:
    """Test suite for mime_type_for."""

    @pytest.mark.parametrize("name,expected", [
        ("photo.jpg", "image/jpeg"),
        ("notes.txt", "text/plain"),
        ("archive.zip", "application/zip"),
        ("noextension", "application/octet-stream"),
        ("weird.unknownext", "application/octet-stream"),
    ])
    def test_guess(self, name, expected):
        """Test extension based lookup with octet-stream fallback."""
        assert mime_type_for(name) == expected


class TestPercentageOf:
    """Test suite for percentage_of."""

    def test_partial(self):
        assert percentage_of(250, 1000, False) == 25.0

    def test_empty_file(self):
        """Test an empty file is at 0 until complete, then 100."""
        assert percentage_of(0, 0, False) == 0.0
        assert percentage_of(0, 0, True) == 100.0
