from dataclasses import dataclass

from barehttp.errors import ErrorKind, HttpError
from barehttp.strutil import leading_int

HTTP_PREFIX = "http://"
HTTPS_PREFIX = "https://"
HTTP_DEFAULT_PORT = 80
HTTPS_DEFAULT_PORT = 443
MAX_HOST_LENGTH = 255       # bytes, port included


@dataclass(frozen=True)
class Target:
    """
    Where a request goes: scheme, host (as written in the URL, IPv6 brackets kept),
    port and path (query string included).
    """
    scheme: str
    host: str
    port: int
    path: str

    @property
    def is_https(self) -> bool:
        return self.scheme == "https"

    @property
    def hostname(self) -> str:
        # the resolver and SNI want the bare address, without [ ]
        if self.host.startswith("[") and self.host.endswith("]"):
            return self.host[1:-1]
        return self.host


def split_host_port(host: str, default_port: int):
    """
    Split "example.com:8080" into host and port. A colon inside a bracketed IPv6
    literal is not a port separator: "[::1]" has no port, "[::1]:8080" has one.

    :param host: host part of the URL
    :param default_port: port used when none is written
    :return: (host, port)
    """
    colon = host.rfind(":")
    if colon == -1:
        return host, default_port

    # for IPv6 the colon only separates a port when it directly follows the "]"
    if host.startswith("[") and host[colon - 1] != "]":
        return host, default_port

    port = leading_int(host[colon + 1:])
    if port <= 0 or port >= 65536:
        raise HttpError(ErrorKind.INVALID_PORT_NUMBER, f"Invalid port number \"{port}\"")

    return host[:colon], port


def parse_url(url: str) -> Target:
    """
    Decompose a URL into scheme, host, port and path.

    :param url: absolute http:// or https:// URL
    :return: the Target
    """
    if not url:
        raise HttpError(ErrorKind.NULL_ARG, "URL parameter empty!")

    if not isinstance(url, str):
        raise HttpError(ErrorKind.INVALID_ARG, f"URL must be a string, got {type(url).__name__}")

    if len(url) < len(HTTP_PREFIX):
        raise HttpError(ErrorKind.INVALID_ARG, f"Invalid URL: {url!r}")

    lowered = url[:len(HTTPS_PREFIX)].lower()
    if lowered.startswith(HTTPS_PREFIX):
        scheme, rest, default_port = "https", url[len(HTTPS_PREFIX):], HTTPS_DEFAULT_PORT
    elif lowered.startswith(HTTP_PREFIX):
        scheme, rest, default_port = "http", url[len(HTTP_PREFIX):], HTTP_DEFAULT_PORT
    else:
        raise HttpError(ErrorKind.INVALID_ARG, "Missing or invalid protocol in passed URL: needs to be \"http://\" or \"https://\"")

    # Port lookup only ever looks at what comes before the first "/"
    slash = rest.find("/")
    if slash == -1:
        host, path = rest, "/"
    else:
        host, path = rest[:slash], rest[slash:]

    if len(host.encode("utf-8")) > MAX_HOST_LENGTH:
        raise HttpError(ErrorKind.OVERFLOW, f"Host name longer than {MAX_HOST_LENGTH} bytes")

    host, port = split_host_port(host, default_port)

    if not host:
        raise HttpError(ErrorKind.INVALID_ARG, f"No host in URL: {url!r}")

    return Target(scheme=scheme, host=host, port=port, path=path)
