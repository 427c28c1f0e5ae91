from barehttp.cacerts import default_ca_certs, load_ca_certs
from barehttp.client import Client, submit
from barehttp.config import ClientConfig
from barehttp.errors import ErrorKind, HttpError
from barehttp.header import Header, find_header
from barehttp.method import Method, method_to_string
from barehttp.request import Request, serialize_request
from barehttp.response import Response, parse_response
from barehttp.url import Target, parse_url

__version__ = "1.0.0"

__all__ = [
    "Client",
    "ClientConfig",
    "ErrorKind",
    "Header",
    "HttpError",
    "Method",
    "Request",
    "Response",
    "Target",
    "default_ca_certs",
    "find_header",
    "load_ca_certs",
    "method_to_string",
    "parse_response",
    "parse_url",
    "serialize_request",
    "submit",
]
