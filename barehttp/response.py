import codecs
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from barehttp.errors import ErrorKind, HttpError
from barehttp.header import Header, find_header
from barehttp.strutil import leading_int, startswith_ignore_case

CRLF = b"\r\n"
CONTENT_DELIMITER = b"\r\n\r\n"
HEADER_SEPARATOR = b": "
HEADER_ENCODING = "iso-8859-1"
DEFAULT_CHARSET = "utf-8"

STATUS_PREFIX = b"HTTP/"
CHUNKED_PREFIX = b"Transfer-Encoding: chunked"
CONTENT_LENGTH_PREFIX = b"Content-Length: "

STATUS_CODE_PATTERN: re.Pattern = re.compile(rb"\s*([0-9]+)")

# Header prefixes captured into their own Response field, each at most once
FIELD_PREFIXES = (
    (b"Server: ", "server"),
    (b"Date: ", "date"),
    (b"Content-Type: ", "content_type"),
    (b"Content-Encoding: ", "content_encoding"),
)


@dataclass(frozen=True)
class Response:
    """
    A parsed HTTP response.

    raw holds the bytes exactly as received. server, date, content_type and
    content_encoding are shortcuts to headers that also appear in headers.
    content is None when the response has no body.
    """
    status_code: int = -1
    raw: bytes = b""
    server: Optional[str] = None
    date: Optional[str] = None
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    content: Optional[bytes] = None
    content_length: int = 0
    headers: Tuple[Header, ...] = field(default_factory=tuple)

    @property
    def headers_count(self) -> int:
        return len(self.headers)

    def header(self, name: str) -> Optional[str]:
        """
        Value of the first header called name (case-insensitive), or None.
        """
        found = find_header(self.headers, name)
        return found.value if found is not None else None

    @property
    def charset(self) -> str:
        ct = self.content_type or ""
        if "charset=" in ct:
            return ct.split("charset=", 1)[1].split(";", 1)[0].strip().strip('"')
        return DEFAULT_CHARSET

    @property
    def text(self) -> str:
        """
        The content decoded with the charset named in Content-Type (utf-8 if there is none).
        Compressed content is not inflated, decode it yourself first.
        """
        if not self.content:
            return ""

        charset = self.charset
        try:
            codecs.lookup(charset)
        except LookupError:
            charset = DEFAULT_CHARSET
        return self.content.decode(charset, errors="replace")


def iter_lines(data: bytes) -> Iterator[Tuple[int, int]]:
    """
    Yield the (start, end) offsets of every CRLF terminated line of data, the CRLF
    itself excluded. Trailing bytes without a CRLF are not yielded.
    """
    start = 0
    end = data.find(CRLF, start)
    while end != -1:
        yield start, end
        start = end + len(CRLF)
        end = data.find(CRLF, start)


def parse_status_code(line: bytes) -> int:
    """
    Read the three characters following the first space of the status line as a
    number, skipping leading whitespace.
    Returns -1 when there is no space or no number there.
    """
    space = line.find(b" ")
    if space == -1:
        return -1

    match = STATUS_CODE_PATTERN.match(line[space + 1:space + 4])
    if match is None:
        return -1
    return int(match.group(1))


def reassemble_chunks(data: bytes, offset: int) -> bytes:
    """
    Concatenate the payloads of a chunked body.

    :param data: the whole response
    :param offset: where the first chunk-size line starts
    :return: the joined chunk payloads
    """
    # Chunked body looks like this:
    # <chunk-size in hex>;extension=test\r\n            # ';extension=test' is optional
    # <chunk-data>\r\n
    # ...
    # 0\r\n
    # \r\n
    out = bytearray()

    while offset < len(data):
        eol = data.find(CRLF, offset)
        if eol == -1:
            break

        # leading_int stops at the ";" of chunk extensions
        size = leading_int(data[offset:eol], 16)
        if size <= 0:
            break

        chunk_start = eol + len(CRLF)
        out.extend(data[chunk_start:chunk_start + size])

        # skip the chunk data and the '\r\n' after it
        offset = chunk_start + size + len(CRLF)

    return bytes(out)


def _decode(data: bytes) -> str:
    return data.decode(HEADER_ENCODING)


def _parse(raw: bytes) -> Response:
    status_code = -1
    parsed_status = False
    parsed_content_length = False
    chunked = False
    content_length = 0
    content = None
    fields = {}
    headers: List[Header] = []

    for start, end in iter_lines(raw):
        line = raw[start:end]

        if not parsed_status and startswith_ignore_case(line, STATUS_PREFIX):
            status_code = parse_status_code(line)
            parsed_status = True
            continue

        captured = False
        for prefix, name in FIELD_PREFIXES:
            if name not in fields and startswith_ignore_case(line, prefix):
                value = _decode(line[len(prefix):])
                fields[name] = value
                headers.append(Header(_decode(line[:len(prefix) - len(HEADER_SEPARATOR)]), value))
                captured = True
                break
        if captured:
            continue

        if not parsed_content_length and startswith_ignore_case(line, CONTENT_LENGTH_PREFIX):
            content_length = max(leading_int(line[len(CONTENT_LENGTH_PREFIX):]), 0)
            headers.append(Header(_decode(line[:len(CONTENT_LENGTH_PREFIX) - len(HEADER_SEPARATOR)]), str(content_length)))
            parsed_content_length = True

        elif startswith_ignore_case(line, CHUNKED_PREFIX):
            headers.append(Header("Transfer-Encoding", "chunked"))
            chunked = True

        elif start > 0 and raw[start - len(CRLF):start + len(CRLF)] == CONTENT_DELIMITER:
            # The empty line closing the header block, everything after it is body
            body_start = start + len(CRLF)
            if chunked:
                # content_length keeps whatever Content-Length said, if anything
                content = reassemble_chunks(raw, body_start)
            elif content_length > 0:
                content = raw[body_start:body_start + content_length]
            else:
                content = None
                content_length = 0
            break

        else:
            separator = line.find(HEADER_SEPARATOR)
            if separator != -1:
                headers.append(Header(_decode(line[:separator]), _decode(line[separator + len(HEADER_SEPARATOR):])))

    if content is None:
        content_length = 0

    return Response(
        status_code=status_code,
        raw=raw,
        server=fields.get("server"),
        date=fields.get("date"),
        content_type=fields.get("content_type"),
        content_encoding=fields.get("content_encoding"),
        content=content,
        content_length=content_length,
        headers=tuple(headers),
    )


def parse_response(raw: bytes) -> Response:
    """
    Parse a complete raw HTTP response (status line, headers and body).

    :param raw: the response bytes as read from the connection
    :return: the Response
    """
    if raw is None:
        raise HttpError(ErrorKind.RESPONSE_PARSE_ERROR, "HTTP response parse error: nothing to parse!")

    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise HttpError(ErrorKind.RESPONSE_PARSE_ERROR, f"HTTP response parse error: expected bytes, got {type(raw).__name__}")

    try:
        return _parse(bytes(raw))
    except MemoryError:
        raise HttpError(ErrorKind.OUT_OF_MEM, "OUT OF MEMORY!") from None
