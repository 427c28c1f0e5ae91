from typing import Optional

import structlog

from barehttp.cacerts import load_ca_certs
from barehttp.config import ClientConfig
from barehttp.debug import ErrorCallback, ErrorReporter
from barehttp.errors import ErrorKind, HttpError
from barehttp.method import method_to_string
from barehttp.request import Request, serialize_request
from barehttp.response import Response, parse_response
from barehttp.transport import SocketTransport
from barehttp.url import parse_url

logger = structlog.get_logger(__name__)


class Client:
    """
    Submits requests. Holds what the requests of one caller share: the settings,
    the trusted CA certificates and the error callback.

    :param config: ClientConfig, defaults apply when None
    :param error_callback: called with a message string for every failed request
    :param transport: object with an exchange() method, a SocketTransport when None
    """

    def __init__(self, config: Optional[ClientConfig] = None, error_callback: Optional[ErrorCallback] = None, transport=None):
        self.config = config if config is not None else ClientConfig()
        self.reporter = ErrorReporter(error_callback)

        if transport is None:
            try:
                self.ca_certs = load_ca_certs(self.config.ca_certs, self.config.ca_bundle_path)
                transport = SocketTransport(self.config, self.ca_certs)
            except HttpError as e:
                self.reporter.report(e)
                raise
        else:
            self.ca_certs = None

        self.transport = transport

    def set_error_callback(self, callback: ErrorCallback) -> bool:
        return self.reporter.set_callback(callback)

    def unset_error_callback(self) -> bool:
        return self.reporter.unset_callback()

    def submit(self, request: Request) -> Response:
        """
        Send the request and wait for the complete response.

        Argument problems (URL, port, method) are raised before anything touches the network.

        :param request: the Request to submit
        :return: the parsed Response
        """
        try:
            return self._submit(request)
        except HttpError as e:
            self.reporter.report(e)
            raise

    def _submit(self, request: Request) -> Response:
        if request is None:
            raise HttpError(ErrorKind.NULL_ARG, "Request parameter NULL!", "submit")

        target = parse_url(request.url)

        method = method_to_string(request.method)
        payload = serialize_request(request, target)

        logger.debug("submitting", method=method, scheme=target.scheme, host=target.host, port=target.port, path=target.path)
        raw = self.transport.exchange(target, payload, request.buffer_size, request.ssl_verification_optional)

        return parse_response(raw)


def submit(request: Request, client: Optional[Client] = None) -> Response:
    """
    Submit a request with the given client, or with a new default one.
    """
    if client is None:
        client = Client()
    return client.submit(request)
