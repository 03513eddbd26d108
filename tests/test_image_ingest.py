"""
Upload ingestion: allow-list, size limit and early rejection.
"""

import pytest

from club_api.errors import BadRequest, InvalidFileType, MultipartError, PayloadTooLarge
from club_api.services.image_ingest import (
    MULTIPART_OVERHEAD,
    PayloadBuffer,
    check_declared_length,
    ingest_image,
    is_valid_image_type,
    normalize_content_type,
    validate_filename,
)

BOUNDARY = "clubformboundary"
FORM_CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"
CLOSING = f"--{BOUNDARY}--\r\n".encode()


def _part_headers(name, filename=None, content_type=None):
    disposition = f'form-data; name="{name}"'
    if filename is not None:
        disposition += f'; filename="{filename}"'
    lines = [f"--{BOUNDARY}", f"Content-Disposition: {disposition}"]
    if content_type:
        lines.append(f"Content-Type: {content_type}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode()


def _text_part(name, value):
    return _part_headers(name) + value.encode() + b"\r\n"


def _file_part(name, filename, content_type, *chunks):
    """Headers, payload chunks and the part terminator as separate body chunks."""
    return [_part_headers(name, filename, content_type), *chunks, b"\r\n"]


class _Chunks:
    """Async chunk source that records how much of it was consumed."""

    def __init__(self, chunks):
        self.chunks = list(chunks)
        self.consumed = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self.consumed >= len(self.chunks):
            raise StopAsyncIteration
        chunk = self.chunks[self.consumed]
        self.consumed += 1
        return chunk


class TestContentTypes:

    @pytest.mark.parametrize("content_type", [
        "image/jpeg", "image/png", "image/gif", "image/webp",
        "image/svg+xml", "image/x-icon", "image/bmp",
    ])
    def test_allowed(self, content_type):
        assert is_valid_image_type(content_type)

    @pytest.mark.parametrize("content_type", ["text/plain", "application/pdf", "image/tiff", "", None])
    def test_rejected(self, content_type):
        assert not is_valid_image_type(content_type)

    def test_parameters_and_case_are_ignored(self):
        assert normalize_content_type("Image/PNG; charset=binary") == "image/png"


class TestFilenames:

    def test_valid(self):
        assert validate_filename("my_photo.png")

    def test_invalid(self):
        assert not validate_filename("")
        assert not validate_filename("file\0.jpg")
        assert not validate_filename("a" * 256)


class TestPayloadBuffer:

    def test_collects_up_to_the_limit(self):
        buffer = PayloadBuffer(max_size=6)
        buffer.extend(b"abc")
        buffer.extend(b"def")

        assert buffer.getvalue() == b"abcdef"
        assert len(buffer) == 6

    def test_raises_as_soon_as_limit_is_exceeded(self):
        buffer = PayloadBuffer(max_size=10)
        buffer.extend(b"x" * 8)

        with pytest.raises(PayloadTooLarge):
            buffer.extend(b"x" * 8)


class TestDeclaredLength:

    def test_small_or_missing_length_passes(self):
        check_declared_length(None, 1024)
        check_declared_length("2048", 1024)

    def test_length_beyond_limit_and_overhead_is_rejected(self):
        with pytest.raises(PayloadTooLarge):
            check_declared_length(str(1024 + MULTIPART_OVERHEAD + 1), 1024)

    def test_garbage_length_is_bad_request(self):
        with pytest.raises(BadRequest):
            check_declared_length("lots", 1024)


class TestIngestImage:

    @pytest.mark.asyncio
    async def test_valid_upload(self):
        body = _file_part("file", "logo.png", "image/png", b"\x89PNG", b"rest") + [
            _text_part("category", "  logos "),
            _text_part("description", ""),
            CLOSING,
        ]

        image = await ingest_image(_Chunks(body), FORM_CONTENT_TYPE, max_size=1024)

        assert image.image_name == "logo.png"
        assert image.content_type == "image/png"
        assert image.data == b"\x89PNGrest"
        assert image.file_size == 8
        assert image.category == "logos"
        assert image.description is None

    @pytest.mark.asyncio
    async def test_text_fields_before_the_file_are_kept(self):
        body = [_text_part("description", "Club logo")] + _file_part("file", "logo.gif", "image/gif", b"GIF89a") + [CLOSING]

        image = await ingest_image(_Chunks(body), FORM_CONTENT_TYPE, max_size=1024)

        assert image.description == "Club logo"
        assert image.data == b"GIF89a"

    @pytest.mark.asyncio
    async def test_oversized_file_stops_reading_the_stream(self):
        source = _Chunks(_file_part("file", "big.png", "image/png", *([b"\x00" * 600] * 10)) + [CLOSING])

        with pytest.raises(PayloadTooLarge):
            await ingest_image(source, FORM_CONTENT_TYPE, max_size=1024)

        assert source.consumed <= 4
        assert source.consumed < len(source.chunks)

    @pytest.mark.asyncio
    async def test_wrong_type_is_rejected_before_payload_is_read(self):
        source = _Chunks(_file_part("file", "notes.txt", "text/plain", b"hello", b"world") + [CLOSING])

        with pytest.raises(InvalidFileType):
            await ingest_image(source, FORM_CONTENT_TYPE, max_size=1024)

        assert source.consumed == 1

    @pytest.mark.asyncio
    async def test_empty_payload_is_bad_request(self):
        source = _Chunks(_file_part("file", "empty.png", "image/png") + [CLOSING])

        with pytest.raises(BadRequest):
            await ingest_image(source, FORM_CONTENT_TYPE, max_size=1024)

    @pytest.mark.asyncio
    async def test_missing_filename_gets_default(self):
        source = _Chunks(_file_part("file", "", "image/gif", b"GIF89a") + [CLOSING])

        image = await ingest_image(source, FORM_CONTENT_TYPE, max_size=1024)

        assert image.image_name == "upload"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["category", "description"])
    async def test_file_in_text_field_is_bad_request(self, field):
        body = _file_part("file", "logo.png", "image/png", b"\x89PNG") + _file_part(field, "x.txt", "text/plain", b"x")

        with pytest.raises(BadRequest) as excinfo:
            await ingest_image(_Chunks(body + [CLOSING]), FORM_CONTENT_TYPE, max_size=1024)

        assert field in excinfo.value.message

    @pytest.mark.asyncio
    async def test_second_file_is_multipart_error(self):
        body = _file_part("file", "a.png", "image/png", b"a") + _file_part("file", "b.png", "image/png", b"b")

        with pytest.raises(MultipartError):
            await ingest_image(_Chunks(body + [CLOSING]), FORM_CONTENT_TYPE, max_size=1024)

    @pytest.mark.asyncio
    async def test_truncated_body_is_multipart_error(self):
        source = _Chunks(_file_part("file", "logo.png", "image/png", b"\x89PNG"))

        with pytest.raises(MultipartError):
            await ingest_image(source, FORM_CONTENT_TYPE, max_size=1024)

    @pytest.mark.asyncio
    async def test_missing_boundary_is_multipart_error(self):
        with pytest.raises(MultipartError):
            await ingest_image(_Chunks([]), "multipart/form-data", max_size=1024)

    @pytest.mark.asyncio
    async def test_non_multipart_body_has_no_file(self):
        with pytest.raises(BadRequest) as excinfo:
            await ingest_image(_Chunks([b"category=logos"]), "application/x-www-form-urlencoded", max_size=1024)

        assert excinfo.value.message == "No file uploaded"
