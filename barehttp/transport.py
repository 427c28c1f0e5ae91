import secrets
import socket
import ssl

import structlog

from barehttp.config import ClientConfig
from barehttp.errors import ErrorKind, HttpError
from barehttp.guid import new_guid
from barehttp.url import Target

logger = structlog.get_logger(__name__)


def build_ssl_context(ca_certs: str, verification_optional: bool = False) -> ssl.SSLContext:
    """
    Create the client-side TLS context trusting exactly the given CA certificates.

    :param ca_certs: PEM text of the trusted root certificates
    :param verification_optional: skip certificate chain and host name checks
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    try:
        context.load_verify_locations(cadata=ca_certs)
    except ssl.SSLError as e:
        raise HttpError(ErrorKind.EXTERNAL_ERROR, f"Could not load the CA certificates: {e}", "build_ssl_context") from e

    if verification_optional:
        # check_hostname has to go first, CERT_NONE is refused while it is on
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    return context


def seed_random() -> None:
    """
    Mix a fresh GUID into the TLS library's random generator before a handshake.
    """
    guid = new_guid(lowercase=bool(secrets.randbits(1)), hyphens=bool(secrets.randbits(1)))
    ssl.RAND_add(guid.encode("ascii"), 0.0)


def write_all(sock, payload: bytes) -> None:
    """
    Send the whole payload, retrying partial writes and TLS want-read/want-write signals.

    :param sock: connected socket or ssl.SSLSocket
    :param payload: bytes to send
    """
    with memoryview(payload) as view:
        offset = 0
        while offset < len(view):
            try:
                sent = sock.send(view[offset:])
            except (ssl.SSLWantReadError, ssl.SSLWantWriteError):
                continue

            if sent <= 0:
                raise ConnectionError("Connection closed while sending the request")
            offset += sent


class SocketTransport:
    """
    Sends one serialized request over a fresh TCP (or TLS) connection and returns
    every byte the server answers with. Nothing is kept between two exchanges.

    Any object with the same exchange() method can stand in for it in a Client.
    """

    def __init__(self, config: ClientConfig, ca_certs: str):
        self.config = config
        self._ssl_contexts = {
            False: build_ssl_context(ca_certs, verification_optional=False),
            True: build_ssl_context(ca_certs, verification_optional=True),
        }

    def exchange(self, target: Target, payload: bytes, buffer_size: int = 0, ssl_verification_optional: bool = False) -> bytes:
        """
        :param target: where to connect
        :param payload: the serialized request
        :param buffer_size: read chunk size hint, 0 for the configured default
        :param ssl_verification_optional: skip certificate checks (HTTPS only)
        :return: the raw response
        """
        buffer = self._allocate_buffer(buffer_size)

        if target.is_https:
            return self._https_exchange(target, payload, buffer, ssl_verification_optional)
        return self._http_exchange(target, payload, buffer)

    def _allocate_buffer(self, buffer_size: int) -> bytearray:
        default_size = self.config.default_buffer_size
        if buffer_size <= default_size:
            return bytearray(default_size)

        try:
            return bytearray(buffer_size)
        except (MemoryError, OverflowError):
            logger.warning("buffer_allocation_failed", requested=buffer_size, fallback=default_size)
            return bytearray(default_size)

    def _http_exchange(self, target: Target, payload: bytes, buffer: bytearray) -> bytes:
        try:
            addresses = socket.getaddrinfo(target.hostname, target.port, socket.AF_UNSPEC, socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError) as e:
            # UnicodeError: the IDNA codec refused the host name (empty or overlong label)
            raise HttpError(ErrorKind.DNS_RESOLUTION_FAILED, f"\"getaddrinfo\" failed for {target.hostname}: {e}", "http_request") from e

        with self._connect(addresses, target) as sock:
            try:
                write_all(sock, payload)
            except OSError as e:
                raise HttpError(ErrorKind.TRANSMISSION_FAILED, f"Connection to server was successful but HTTP Request could not be transmitted: {e}", "http_request") from e
            logger.debug("request_sent", host=target.host, port=target.port, size=len(payload))

            response = self._read_all(sock, buffer, "http_request")

        if not response:
            raise HttpError(ErrorKind.EMPTY_RESPONSE, "HTTP response string empty!", "http_request")
        return response

    def _connect(self, addresses, target: Target) -> socket.socket:
        last_error = None

        # Try each resolved address in turn, like socket.create_connection does
        for family, socktype, proto, _, address in addresses:
            sock = socket.socket(family, socktype, proto)
            try:
                sock.settimeout(self.config.connect_timeout)
                sock.connect(address)
            except OSError as e:
                sock.close()
                last_error = e
                continue

            sock.settimeout(self.config.read_timeout)
            logger.debug("connected", host=target.host, port=target.port, address=address[0])
            return sock

        raise HttpError(ErrorKind.CONNECTION_FAILED, f"Connection to server {target.host}:{target.port} failed! {last_error}", "http_request")

    def _https_exchange(self, target: Target, payload: bytes, buffer: bytearray, ssl_verification_optional: bool) -> bytes:
        context = self._ssl_contexts[bool(ssl_verification_optional)]
        if ssl_verification_optional:
            logger.warning("ssl_verification_disabled", host=target.host)

        seed_random()

        try:
            raw_sock = socket.create_connection((target.hostname, target.port), timeout=self.config.connect_timeout)
        except (OSError, UnicodeError) as e:
            raise HttpError(ErrorKind.EXTERNAL_ERROR, f"HTTPS request failed: connecting to {target.host}:{target.port} returned {e}", "https_request") from e

        with raw_sock:
            try:
                tls_sock = context.wrap_socket(raw_sock, server_hostname=target.hostname)
            except (ssl.SSLError, ssl.CertificateError, OSError) as e:
                raise HttpError(ErrorKind.EXTERNAL_ERROR, f"HTTPS request failed: TLS handshake returned {e}", "https_request") from e

            with tls_sock:
                tls_sock.settimeout(self.config.read_timeout)
                logger.debug("tls_established", host=target.host, port=target.port, version=tls_sock.version(), cipher=tls_sock.cipher()[0])

                try:
                    write_all(tls_sock, payload)
                except OSError as e:
                    raise HttpError(ErrorKind.EXTERNAL_ERROR, f"HTTPS request failed: write returned {e}", "https_request") from e
                logger.debug("request_sent", host=target.host, port=target.port, size=len(payload))

                response = self._read_all(tls_sock, buffer, "https_request")

        if not response:
            raise HttpError(ErrorKind.EXTERNAL_ERROR, "HTTP response string empty!", "https_request")
        return response

    def _read_all(self, sock, buffer: bytearray, origin: str) -> bytes:
        """
        Read until the server closes the connection (EOF or TLS close-notify).

        :param sock: connected socket or ssl.SSLSocket
        :param buffer: scratch buffer, its size is the read chunk size
        :param origin: step name used in error messages
        :return: everything that was received
        """
        limit = self.config.max_response_size
        response = bytearray()

        with memoryview(buffer) as view:
            while True:
                try:
                    received = sock.recv_into(view)
                except (ssl.SSLWantReadError, ssl.SSLWantWriteError):
                    continue
                except ssl.SSLZeroReturnError:
                    # clean close-notify from the peer
                    break
                except OSError as e:
                    raise HttpError(ErrorKind.EXTERNAL_ERROR, f"Reading the response failed: {e}", origin) from e

                if received == 0:
                    # EOF; ready to close the connection
                    break

                try:
                    response.extend(view[:received])
                except MemoryError:
                    raise HttpError(ErrorKind.INTERNAL_BUFFER_ERROR, "Response buffer could not grow", origin) from None

                if limit is not None and len(response) > limit:
                    raise HttpError(ErrorKind.OVERFLOW, f"Response exceeded {limit} bytes", origin)

        logger.debug("response_received", origin=origin, size=len(response))
        return bytes(response)
