import re

DECIMAL_PATTERN: re.Pattern = re.compile(rb"\s*([+-]?[0-9]+)")
HEX_PATTERN: re.Pattern = re.compile(rb"\s*([+-]?[0-9a-fA-F]+)")


def leading_int(data, base: int = 10) -> int:
    """
    Parse the integer at the start of data and ignore whatever follows it.
    Returns 0 when data does not start with a number.

    :param data: str or bytes
    :param base: 10 or 16
    """
    if isinstance(data, str):
        data = data.encode("iso-8859-1", errors="replace")

    match = (HEX_PATTERN if base == 16 else DECIMAL_PATTERN).match(data)
    if match is None:
        return 0
    return int(match.group(1), base)


def startswith_ignore_case(data: bytes, prefix: bytes) -> bool:
    return data[:len(prefix)].lower() == prefix.lower()
