from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from barehttp.header import HEADER_SEPARATOR, Header
from barehttp.method import Method, method_to_string
from barehttp.url import Target

HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"


@dataclass(frozen=True)
class Request:
    """
    Everything needed to submit one HTTP request.

    content_length defaults to the byte length of content. buffer_size is a hint
    for the read chunk size; 0 keeps the client's default. Setting
    ssl_verification_optional skips certificate and host name checks for HTTPS.
    """
    url: str
    method: Method = Method.GET
    content: Optional[Union[bytes, str]] = None
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    content_length: Optional[int] = None
    additional_headers: Tuple[Header, ...] = field(default_factory=tuple)
    buffer_size: int = 0
    ssl_verification_optional: bool = False

    def __post_init__(self):
        # Lists are handy to build, tuples keep the request read-only
        object.__setattr__(self, "additional_headers", tuple(self.additional_headers))

    @property
    def body(self) -> bytes:
        if self.content is None:
            return b""
        if isinstance(self.content, str):
            return self.content.encode("utf-8")
        return bytes(self.content)

    @property
    def declared_content_length(self) -> int:
        if self.content_length is not None:
            return self.content_length
        return len(self.body)

    @property
    def has_body(self) -> bool:
        """
        The body block is only written when there is content, a content type and
        a positive length.
        """
        return (
            self.content is not None
            and self.content_type is not None
            and self.declared_content_length > 0
            and len(self.body) > 0
        )


def serialize_request(request: Request, target: Target) -> bytes:
    """
    Build the raw bytes of the request.

    :param request: the Request to send
    :param target: the parsed URL of request
    :return: request line, headers and (optional) body, ready for the socket
    """
    method = method_to_string(request.method)

    lines = [
        f"{method} {target.path} {HTTP_VERSION}",
        f"Host{HEADER_SEPARATOR}{target.host}",
        f"Connection{HEADER_SEPARATOR}Close",
    ]
    for header in request.additional_headers:
        lines.append(header.serialize())

    head = CRLF.join(lines) + CRLF

    if not request.has_body:
        return (head + CRLF).encode("utf-8")

    head += f"Content-Type{HEADER_SEPARATOR}{request.content_type}{CRLF}"
    if request.content_encoding:
        head += f"Content-Encoding{HEADER_SEPARATOR}{request.content_encoding}{CRLF}"
    head += f"Content-Length{HEADER_SEPARATOR}{request.declared_content_length}{CRLF}{CRLF}"

    # The body is followed by its own CRLF and then the closing CRLF
    return head.encode("utf-8") + request.body + (CRLF + CRLF).encode("ascii")
