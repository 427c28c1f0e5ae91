from dataclasses import dataclass
from typing import Iterable, Optional

HEADER_SEPARATOR = ": "

# Response headers captured into dedicated fields as well as the header list
WELL_KNOWN_HEADERS = (
    "Server",
    "Date",
    "Content-Type",
    "Content-Encoding",
    "Content-Length",
    "Transfer-Encoding",
)


@dataclass(frozen=True)
class Header:
    """
    One header line. The name is kept exactly as it was written (no trailing colon),
    comparisons through is_type() ignore case.
    """
    type: str
    value: str

    def is_type(self, name: str) -> bool:
        return self.type.lower() == name.lower()

    def serialize(self) -> str:
        return f"{self.type}{HEADER_SEPARATOR}{self.value}"


def find_header(headers: Iterable[Header], name: str) -> Optional[Header]:
    """
    Return the first header called name (case-insensitive), or None.
    """
    for header in headers:
        if header.is_type(name):
            return header
    return None


def parse_header_line(line: str) -> Header:
    """
    Split a "Name: value" string into a Header.

    :param line: header line without the trailing CRLF
    :return: the Header
    """
    if ":" not in line:
        raise ValueError(f"Malformed header line: {line!r}")

    name, value = line.split(":", 1)
    name = name.strip()
    if not name:
        raise ValueError(f"Header name missing: {line!r}")

    return Header(name, value.strip())
