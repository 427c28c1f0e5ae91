from enum import IntEnum

from barehttp.errors import ErrorKind, HttpError


class Method(IntEnum):
    GET = 0
    HEAD = 1
    POST = 2
    PATCH = 3
    PUT = 4
    DELETE = 5
    CONNECT = 6
    OPTIONS = 7
    TRACE = 8


# Fixed lookup, request lines only ever carry one of these tokens
METHOD_TOKENS = {
    Method.GET: "GET",
    Method.HEAD: "HEAD",
    Method.POST: "POST",
    Method.PATCH: "PATCH",
    Method.PUT: "PUT",
    Method.DELETE: "DELETE",
    Method.CONNECT: "CONNECT",
    Method.OPTIONS: "OPTIONS",
    Method.TRACE: "TRACE",
}


def method_to_string(method) -> str:
    """
    Convert a Method (or its integer value) into the request-line token.

    :param method: Method member or plain int
    :return: the method token, e.g. "GET"
    """
    # bool is an int subclass but never a meaningful method
    if isinstance(method, bool) or not isinstance(method, int):
        raise HttpError(ErrorKind.INVALID_HTTP_METHOD_NAME, f"Invalid HTTP method: {method!r}")

    try:
        return METHOD_TOKENS[Method(method)]
    except ValueError:
        raise HttpError(ErrorKind.INVALID_HTTP_METHOD_NAME, f"Invalid HTTP method: {method!r}") from None
