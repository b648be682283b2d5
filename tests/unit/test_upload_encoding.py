"""Tests for request encoding."""
import re
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import aiohttp
import pytest

from chunkload.core.upload import (
    CapabilityProfile,
    EncodingStrategy,
    FileHandle,
    RequestEncoder,
    UploadSettings,
    encode,
    plan,
)
from chunkload.core.upload.strategies import new_boundary

BOUNDARY = '----chunkloadboundarytest'

BROKEN_BLOB = CapabilityProfile(blob_in_multipart_broken=True)
NO_BINARY = CapabilityProfile(blob_in_multipart_broken=True, can_send_binary=False)


def parse_multipart(body: bytes, boundary: str):
    """Split a multipart body into (headers, content) pairs."""
    delimiter = b'--' + boundary.encode()
    assert body.endswith(delimiter + b'--\r\n')
    parts = body.split(delimiter)[1:-1]
    result = []
    for part in parts:
        assert part.startswith(b'\r\n') and part.endswith(b'\r\n')
        head, _, content = part[2:-2].partition(b'\r\n\r\n')
        result.append((head.decode(), content))
    return result


def part_name(headers: str) -> str:
    return re.search(r'name="([^"]*)"', headers).group(1)


class TestEncodingStrategy:
    """Test suite for strategy selection."""

    @pytest.mark.parametrize("profile,multipart,expected", [
        (CapabilityProfile.full(), True, EncodingStrategy.STRUCTURED),
        (BROKEN_BLOB, True, EncodingStrategy.MULTIPART_TEXT),
        (CapabilityProfile(can_use_multipart=False), True, EncodingStrategy.MULTIPART_TEXT),
        (NO_BINARY, True, EncodingStrategy.OCTET_STREAM),
        (CapabilityProfile.full(), False, EncodingStrategy.OCTET_STREAM),
        (BROKEN_BLOB, False, EncodingStrategy.OCTET_STREAM),
        (CapabilityProfile.minimal(), True, EncodingStrategy.OCTET_STREAM),
    ])
    def test_strategy_table(self, profile, multipart, expected):
        """Test first matching strategy wins."""
        encoder = RequestEncoder(profile, UploadSettings(multipart=multipart))

        assert encoder.strategy is expected


class TestFormFields:
    """Test suite for form field composition."""

    @pytest.fixture
    def handle(self):
        return FileHandle(id="p1", name="photo.jpg", size=1000, path=Path("photo.jpg"))

    def test_order_chunked(self, handle):
        """Test name, chunk, chunks, fixed fields, extras order."""
        settings = UploadSettings(
            chunk_size=300,
            multipart_fixed_fields={'token': 'abc'},
            multipart_params_extra={'album': 'x'},
        )
        encoder = RequestEncoder(CapabilityProfile.full(), settings)

        fields = encoder.form_fields(handle, 2, plan(1000, 300))

        assert list(fields) == ['name', 'chunk', 'chunks', 'token', 'album']
        assert fields['chunk'] == 2
        assert fields['chunks'] == 4

    def test_single_request_has_no_chunk_fields(self, handle):
        """Test chunk/chunks are omitted when not chunked."""
        encoder = RequestEncoder(CapabilityProfile.full(), UploadSettings())

        fields = encoder.form_fields(handle, 0, plan(1000, 0))

        assert fields == {'name': 'photo.jpg'}

    def test_extras_override_fixed(self, handle):
        """Test per-upload extras win over fixed fields."""
        settings = UploadSettings(
            multipart_fixed_fields={'key': 'fixed'},
            multipart_params_extra={'key': 'extra'},
        )
        encoder = RequestEncoder(CapabilityProfile.full(), settings)

        assert encoder.form_fields(handle, 0, plan(1000, 0))['key'] == 'extra'

    def test_target_name(self):
        """Test target_name replaces the file name."""
        handle = FileHandle(id="p1", name="a.txt", size=3, path=Path("a.txt"), target_name="b.txt")
        encoder = RequestEncoder(CapabilityProfile.full(), UploadSettings())

        assert encoder.form_fields(handle, 0, plan(3, 0))['name'] == 'b.txt'


class TestMultipartText:
    """Test suite for the hand-built multipart body."""

    @pytest.fixture
    def handle(self):
        return FileHandle(id="p1", name="photo.jpg", size=1000, path=Path("photo.jpg"))

    @pytest.fixture
    def encoder(self):
        settings = UploadSettings(
            chunk_size=300,
            multipart_fixed_fields={'token': 'abc'},
            file_field_name='upload',
            headers={'X-Token': 't'},
        )
        return RequestEncoder(BROKEN_BLOB, settings)

    def test_body_parts(self, encoder, handle):
        """Test fields then the file part, each framed by the boundary."""
        chunk = bytes(range(256)) + b'\r\n--' + bytes(40)
        request = encoder.encode("http://h/u", chunk, 1, plan(1000, 300), handle, boundary=BOUNDARY)

        parts = parse_multipart(request.body, BOUNDARY)

        assert [part_name(h) for h, _ in parts] == ['name', 'chunk', 'chunks', 'token', 'upload']
        assert [c for _, c in parts[:4]] == [b'photo.jpg', b'1', b'4', b'abc']
        file_headers, file_data = parts[4]
        assert 'filename="photo.jpg"' in file_headers
        assert 'Content-Type: image/jpeg' in file_headers
        assert file_data == chunk

    def test_overhead_and_offset(self, encoder, handle):
        """Test overhead is body length minus payload and offset points at the data."""
        chunk = b'x' * 300
        request = encoder.encode("http://h/u", chunk, 0, plan(1000, 300), handle, boundary=BOUNDARY)

        assert request.strategy is EncodingStrategy.MULTIPART_TEXT
        assert request.payload_size == 300
        assert request.overhead == len(request.body) - 300
        assert request.content_length == len(request.body)
        assert request.body[request.payload_offset:request.payload_offset + 300] == chunk

    def test_headers(self, encoder, handle):
        """Test content type carries the boundary and custom headers stay."""
        request = encoder.encode("http://h/u", b'x', 0, plan(1000, 300), handle, boundary=BOUNDARY)

        assert request.headers['Content-Type'] == f'multipart/form-data; boundary={BOUNDARY}'
        assert request.headers['X-Token'] == 't'
        assert request.url == "http://h/u"
        assert request.query_args == {}

    def test_generated_boundary(self, encoder, handle):
        """Test a fresh boundary is generated when none is given."""
        request = encoder.encode("http://h/u", b'x', 0, plan(1000, 300), handle)

        boundary = request.headers['Content-Type'].split('boundary=', 1)[1]
        assert boundary.startswith('----chunkloadboundary')
        assert parse_multipart(request.body, boundary)[-1][1] == b'x'

    def test_new_boundary_unique(self):
        """Test boundaries differ between calls."""
        assert new_boundary() != new_boundary()

    def test_quotes_in_names_escaped(self):
        """Test quotes and line breaks cannot break out of the header."""
        handle = FileHandle(id="p1", name='we"ird\r\nname.txt', size=1, path=Path("x"))
        encoder = RequestEncoder(BROKEN_BLOB, UploadSettings())

        request = encoder.encode("http://h/u", b'x', 0, plan(1, 0), handle, boundary=BOUNDARY)

        assert b'filename="we%22ird%0D%0Aname.txt"' in request.body

    def test_payload_bytes_sent(self, encoder, handle):
        """Test wire bytes map onto payload bytes."""
        request = encoder.encode("http://h/u", b'x' * 300, 0, plan(1000, 300), handle, boundary=BOUNDARY)

        assert request.payload_bytes_sent(0) == 0
        assert request.payload_bytes_sent(request.payload_offset) == 0
        assert request.payload_bytes_sent(request.payload_offset + 120) == 120
        assert request.payload_bytes_sent(len(request.body)) == 300


class TestOctetStream:
    """Test suite for raw octet stream requests."""

    @pytest.fixture
    def handle(self):
        return FileHandle(id="p1", name="my file.bin", size=1000, path=Path("my file.bin"))

    def test_body_is_raw_chunk(self, handle):
        """Test body is exactly the chunk with no framing."""
        encoder = RequestEncoder(CapabilityProfile.full(), UploadSettings(multipart=False, chunk_size=300))
        chunk = b'abc' * 100

        request = encoder.encode("http://h/u", chunk, 3, plan(1000, 300), handle)

        assert request.strategy is EncodingStrategy.OCTET_STREAM
        assert request.body == chunk
        assert request.overhead == 0
        assert request.payload_offset == 0
        assert request.headers['Content-Type'] == 'application/octet-stream'

    def test_fields_in_query(self, handle):
        """Test form values move into the query string."""
        settings = UploadSettings(multipart=False, chunk_size=300, multipart_params_extra={'a': 'b&c'})
        encoder = RequestEncoder(CapabilityProfile.full(), settings)

        request = encoder.encode("http://h/u?x=1", b'z', 3, plan(1000, 300), handle)

        query = parse_qs(urlparse(request.url).query)
        assert query == {'x': ['1'], 'name': ['my file.bin'], 'chunk': ['3'], 'chunks': ['4'], 'a': ['b&c']}
        assert request.query_args == {'name': 'my file.bin', 'chunk': 3, 'chunks': 4, 'a': 'b&c'}
        assert request.url.startswith("http://h/u?x=1&name=my%20file.bin")

    def test_content_type_header_overridden(self, handle):
        """Test caller Content-Type is replaced."""
        settings = UploadSettings(multipart=False, headers={'content-type': 'text/plain', 'X-A': '1'})
        encoder = RequestEncoder(CapabilityProfile.full(), settings)

        request = encoder.encode("http://h/u", b'z', 0, plan(1000, 0), handle)

        assert request.headers == {'X-A': '1', 'Content-Type': 'application/octet-stream'}

    def test_fallback_without_binary_multipart(self, handle):
        """Test multipart requested but unavailable sends an unframed body."""
        encoder = RequestEncoder(NO_BINARY, UploadSettings(multipart=True))

        request = encoder.encode("http://h/u", b'raw', 0, plan(1000, 0), handle)

        assert request.body == b'raw'
        assert b'--' not in request.body
        assert 'name=my%20file.bin' in request.url


class TestStructured:
    """Test suite for structured multipart requests."""

    def test_form_data_body(self):
        """Test body is a FormData with a file part."""
        handle = FileHandle(id="p1", name="a.txt", size=3, path=Path("a.txt"))
        settings = UploadSettings(headers={'Content-Type': 'text/plain', 'X-A': '1'})

        request = encode(b'abc', 0, plan(3, 0), handle, CapabilityProfile.full(), settings, "http://h/u")

        assert request.strategy is EncodingStrategy.STRUCTURED
        assert isinstance(request.body, aiohttp.FormData)
        assert request.body.is_multipart
        assert request.content_length is None
        assert request.payload_size == 3
        assert request.headers == {'X-A': '1'}
