from enum import IntEnum


class ErrorKind(IntEnum):
    """
    Result codes of a request. The numeric values are stable.
    """
    SUCCESS = 0
    UNINITIALIZED = 10
    OUT_OF_MEM = 100
    NULL_ARG = 200
    INVALID_ARG = 300
    INVALID_PORT_NUMBER = 400
    INVALID_HTTP_METHOD_NAME = 500
    INTERNAL_BUFFER_ERROR = 600
    RESPONSE_PARSE_ERROR = 700
    EXTERNAL_ERROR = 800
    OVERFLOW = 900
    CONNECTION_FAILED = 1000
    TRANSMISSION_FAILED = 1100
    DNS_RESOLUTION_FAILED = 1200
    EMPTY_RESPONSE = 1300


class HttpError(RuntimeError):
    """
    Raised for every failed request, parse or argument check.

    :param kind: the ErrorKind describing what went wrong
    :param message: human readable description
    :param origin: name of the step that failed (filled in by the client if empty)
    """

    def __init__(self, kind: ErrorKind, message: str, origin: str = ""):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.origin = origin

    def __str__(self):
        return f"{self.kind.name}: {self.message}"
