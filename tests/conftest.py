"""Shared fixtures: one-shot local HTTP and HTTPS servers and a recording fake transport."""

import socket
import ssl
import threading
import time
from pathlib import Path

import pytest

CERTS_DIR = Path(__file__).parent / "certs"
# CA that signed certs/server.pem (CN and IP SAN 127.0.0.1)
TEST_CA_PEM = (CERTS_DIR / "ca.pem").read_text(encoding="ascii")

JSON_RESPONSE = (
    b"HTTP/1.1 200 OK\r\n"
    b"Server: test-server\r\n"
    b"Content-Type: application/json\r\n"
    b"Content-Length: 11\r\n"
    b"\r\n"
    b'{"ok":true}'
)


def read_until(sock, marker: bytes) -> bytes:
    data = b""
    while marker not in data:
        chunk = sock.recv(4096)
        if not chunk:
            break
        data += chunk
    return data


class OneShotServer:
    """
    Accepts a single connection on 127.0.0.1, reads the request head, answers with
    canned bytes (or whatever a callable builds from the request) and closes.
    """

    def __init__(self, response, delay: float = 0.0, wait_for_request: bool = True):
        self.response = response
        self.delay = delay
        self.wait_for_request = wait_for_request
        self.received = b""

        self._srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._srv.bind(("127.0.0.1", 0))
        self._srv.listen(1)
        self._srv.settimeout(10)
        self.port = self._srv.getsockname()[1]

        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.port}"

    def _serve(self):
        try:
            client, _ = self._srv.accept()
        except OSError:
            return

        with client:
            client.settimeout(10)
            try:
                conn = self._wrap(client)
            except OSError:
                return

            with conn:
                self._answer(conn)

    def _answer(self, client):
        try:
            head = read_until(client, b"\r\n\r\n") if self.wait_for_request else b""
            self.received = head
            response = self.response(head) if callable(self.response) else self.response

            if self.delay:
                time.sleep(self.delay)
            if response:
                client.sendall(response)

            # Half-close, then drain what is left of the request so closing
            # the socket sends a FIN rather than a reset
            self._close_write(client)
            rest = b""
            while True:
                chunk = client.recv(4096)
                if not chunk:
                    break
                rest += chunk
            self.received = head + rest
        except OSError:
            # the client gave up first (timeouts, size limits)
            pass

    def _wrap(self, client):
        return client

    def _close_write(self, client):
        client.shutdown(socket.SHUT_WR)

    def close(self):
        self._thread.join(timeout=10)
        self._srv.close()


class TlsOneShotServer(OneShotServer):
    """
    OneShotServer speaking TLS with the certificate in tests/certs. The response
    is followed by a close-notify alert.
    """

    def __init__(self, response, delay: float = 0.0, wait_for_request: bool = True):
        self._context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        self._context.load_cert_chain(CERTS_DIR / "server.pem", CERTS_DIR / "server.key")
        self.handshake_error = None
        super().__init__(response, delay, wait_for_request)

    @property
    def url(self) -> str:
        return f"https://127.0.0.1:{self.port}"

    def _wrap(self, client):
        try:
            return self._context.wrap_socket(client, server_side=True)
        except OSError as e:
            self.handshake_error = e
            raise

    def _close_write(self, client):
        # unwrap() sends close-notify, it fails once the client hangs up without answering it
        try:
            client.unwrap()
        except OSError:
            pass


@pytest.fixture
def http_server():
    servers = []

    def start(response, delay: float = 0.0, wait_for_request: bool = True) -> OneShotServer:
        server = OneShotServer(response, delay, wait_for_request)
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.close()


@pytest.fixture
def https_server():
    servers = []

    def start(response, delay: float = 0.0, wait_for_request: bool = True) -> TlsOneShotServer:
        server = TlsOneShotServer(response, delay, wait_for_request)
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.close()


@pytest.fixture
def server_ca() -> str:
    """PEM of the CA that signed the HTTPS test server certificate."""
    return TEST_CA_PEM


@pytest.fixture
def closed_port() -> int:
    """A local port nothing listens on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


class RecordingTransport:
    """Stands in for SocketTransport: records every exchange and replays one answer."""

    def __init__(self, response=JSON_RESPONSE):
        self.response = response
        self.calls = []

    def exchange(self, target, payload, buffer_size=0, ssl_verification_optional=False):
        self.calls.append((target, payload, buffer_size, ssl_verification_optional))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()
