"""
Image upload ingestion: content-type allow-list, filename checks and
size-limited accumulation of the payload.

The request body is fed to python-multipart as it arrives from the client.
The file part is validated as soon as its headers are parsed, and the size
limit is checked after every chunk, so an oversized upload is rejected
without reading the rest of the body.
"""
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional
import logging

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from club_api.errors import BadRequest, InvalidFileType, MultipartError, PayloadTooLarge

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    "image/x-icon",
    "image/bmp",
})

MAX_FILENAME_LENGTH = 255
DEFAULT_FILENAME = "upload"

FILE_FIELD = "file"
MAX_FORM_FIELDS = 10
MAX_FIELD_SIZE = 64 * 1024

# Room for multipart boundaries and the text fields on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024


@dataclass
class IngestedImage:
    """A validated upload, ready to be stored as one row."""
    image_name: str
    content_type: str
    data: bytes
    category: Optional[str] = None
    description: Optional[str] = None

    @property
    def file_size(self) -> int:
        return len(self.data)


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case the media type and drop parameters such as charset."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_valid_image_type(content_type: Optional[str]) -> bool:
    return normalize_content_type(content_type) in ALLOWED_IMAGE_TYPES


def validate_filename(filename: Optional[str]) -> bool:
    return bool(filename) and len(filename) <= MAX_FILENAME_LENGTH and "\0" not in filename


def check_image_type(content_type: Optional[str]) -> str:
    """
    Returns:
        str: the normalized media type

    Raises:
        InvalidFileType: content type outside the image allow-list
    """
    normalized_type = normalize_content_type(content_type)
    if normalized_type not in ALLOWED_IMAGE_TYPES:
        logger.warning(f"Rejected upload with content type '{content_type}'")
        raise InvalidFileType(details=f"Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}")
    return normalized_type


def check_declared_length(content_length: Optional[str], max_size: int) -> None:
    """
    Reject a request up front when its declared body size cannot fit.

    Raises:
        PayloadTooLarge: if Content-Length exceeds max_size plus multipart overhead
    """
    if not content_length:
        return
    try:
        declared = int(content_length)
    except ValueError:
        raise BadRequest("Invalid Content-Length header") from None
    if declared > max_size + MULTIPART_OVERHEAD:
        logger.warning(f"Rejecting upload before parsing: Content-Length {declared:,} > limit {max_size:,}")
        raise PayloadTooLarge(details={"max_size": max_size})


class PayloadBuffer:
    """Byte accumulator that refuses to grow past max_size."""

    def __init__(self, max_size: int):
        self.max_size = max_size
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def extend(self, chunk: bytes) -> None:
        """
        Raises:
            PayloadTooLarge: as soon as the running total exceeds max_size
        """
        self._buffer.extend(chunk)
        if len(self._buffer) > self.max_size:
            logger.warning(
                f"Upload exceeded maximum size after {len(self._buffer):,} bytes (limit {self.max_size:,})"
            )
            raise PayloadTooLarge(details={"max_size": self.max_size})

    def getvalue(self) -> bytes:
        return bytes(self._buffer)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _decode(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


class _Part:
    def __init__(self):
        self.headers: Dict[bytes, bytes] = {}
        self.name = ""
        self.is_file = False
        self.text = bytearray()


class ImageFormReader:
    """
    Incremental reader for the upload form: one `file` part plus optional
    `category` and `description` text fields.

    Validation errors are raised from inside the parser callbacks, which
    stops feeding the parser and therefore stops reading the client stream.
    """

    def __init__(self, content_type: Optional[str], max_size: int, max_fields: int = MAX_FORM_FIELDS):
        media_type, options = parse_options_header(content_type)
        if media_type != b"multipart/form-data":
            # A urlencoded or JSON body cannot carry a file
            raise BadRequest("No file uploaded")
        boundary = options.get(b"boundary")
        if not boundary:
            raise MultipartError(details="Missing boundary in multipart/form-data")

        self.max_size = max_size
        self.max_fields = max_fields
        self.fields: Dict[str, str] = {}
        self.filename: Optional[str] = None
        self.file_type: Optional[str] = None
        self.payload: Optional[PayloadBuffer] = None

        self._field_count = 0
        self._part: Optional[_Part] = None
        self._header_field = b""
        self._header_value = b""
        self._complete = False
        self._parser = MultipartParser(boundary, callbacks={
            "on_part_begin": self._on_part_begin,
            "on_part_data": self._on_part_data,
            "on_part_end": self._on_part_end,
            "on_header_field": self._on_header_field,
            "on_header_value": self._on_header_value,
            "on_header_end": self._on_header_end,
            "on_headers_finished": self._on_headers_finished,
            "on_end": self._on_end,
        })

    def _on_part_begin(self) -> None:
        self._part = _Part()

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._part.headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        part = self._part
        disposition, options = parse_options_header(part.headers.get(b"content-disposition"))
        if disposition != b"form-data" or b"name" not in options:
            raise MultipartError(details="Part without a form-data name")
        part.name = _decode(options[b"name"])

        if b"filename" not in options:
            self._field_count += 1
            if self._field_count > self.max_fields:
                raise MultipartError(details=f"Too many form fields (max {self.max_fields})")
            return

        if part.name != FILE_FIELD:
            raise BadRequest(f"Field '{part.name}' must be text, not a file")
        if self.payload is not None:
            raise MultipartError(details="Only one file may be uploaded")

        # Type and name are settled before any payload byte is accepted
        self.file_type = check_image_type(_decode(part.headers.get(b"content-type", b"")))
        filename = _decode(options[b"filename"]) or DEFAULT_FILENAME
        if not validate_filename(filename):
            raise BadRequest("Invalid file name")
        self.filename = filename
        self.payload = PayloadBuffer(self.max_size)
        part.is_file = True

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        part = self._part
        if part.is_file:
            self.payload.extend(data[start:end])
            return
        part.text.extend(data[start:end])
        if len(part.text) > MAX_FIELD_SIZE:
            raise MultipartError(details=f"Form field '{part.name}' is too large")

    def _on_part_end(self) -> None:
        part = self._part
        if not part.is_file:
            self.fields[part.name] = _decode(bytes(part.text))
        self._part = None

    def _on_end(self) -> None:
        self._complete = True

    def feed(self, chunk: bytes) -> None:
        try:
            self._parser.write(chunk)
        except MultipartParseError as e:
            raise MultipartError(details=str(e)) from None

    async def read(self, stream: AsyncIterator[bytes]) -> IngestedImage:
        """
        Consume the body stream and return the validated upload.

        Raises:
            InvalidFileType: content type outside the image allow-list
            PayloadTooLarge: file larger than max_size
            BadRequest: no file, an empty one, a bad filename or a file in a text field
            MultipartError: malformed or truncated body
        """
        async for chunk in stream:
            if chunk:
                self.feed(chunk)
        self._parser.finalize()
        if not self._complete:
            raise MultipartError(details="Unexpected end of multipart body")

        if self.payload is None or not len(self.payload):
            raise BadRequest("No file uploaded")

        return IngestedImage(
            image_name=self.filename,
            content_type=self.file_type,
            data=self.payload.getvalue(),
            category=_clean_text(self.fields.get("category")),
            description=_clean_text(self.fields.get("description")),
        )


async def ingest_image(stream: AsyncIterator[bytes], content_type: Optional[str], max_size: int) -> IngestedImage:
    """Read an image upload form from a raw multipart body stream."""
    return await ImageFormReader(content_type, max_size).read(stream)
