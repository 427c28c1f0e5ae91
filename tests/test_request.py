"""Tests for request serialization."""

import pytest

from barehttp import ErrorKind, Header, HttpError, Method, Request, parse_url, serialize_request


def serialize(request: Request) -> bytes:
    return serialize_request(request, parse_url(request.url))


class TestRequestLine:
    def test_minimal_get(self) -> None:
        raw = serialize(Request(url="http://example.com/index.html"))
        assert raw == (
            b"GET /index.html HTTP/1.1\r\n"
            b"Host: example.com\r\n"
            b"Connection: Close\r\n"
            b"\r\n"
        )

    def test_host_header_has_no_port(self) -> None:
        raw = serialize(Request(url="http://example.com:8080/"))
        assert b"Host: example.com\r\n" in raw

    @pytest.mark.parametrize("method", list(Method))
    def test_method_token(self, method) -> None:
        raw = serialize(Request(url="https://example.com/x", method=method))
        assert raw.startswith(f"{method.name} /x HTTP/1.1\r\n".encode())

    def test_invalid_method(self) -> None:
        with pytest.raises(HttpError) as exc_info:
            serialize(Request(url="http://example.com/", method=99))
        assert exc_info.value.kind is ErrorKind.INVALID_HTTP_METHOD_NAME


class TestHeaders:
    def test_additional_headers_keep_order(self) -> None:
        request = Request(
            url="http://example.com/",
            additional_headers=[Header("Accept", "*/*"), Header("X-Trace", "abc")],
        )
        raw = serialize(request)
        assert raw.endswith(b"Connection: Close\r\nAccept: */*\r\nX-Trace: abc\r\n\r\n")

    def test_headers_are_stored_as_tuple(self) -> None:
        request = Request(url="http://example.com/", additional_headers=[Header("A", "1")])
        assert request.additional_headers == (Header("A", "1"),)


class TestBody:
    def test_post_with_body(self) -> None:
        body = '{"foo" : "bar"}'
        request = Request(
            url="https://postman-echo.com/post",
            method=Method.POST,
            content=body,
            content_type="application/json",
        )
        raw = serialize(request)
        assert raw == (
            b"POST /post HTTP/1.1\r\n"
            b"Host: postman-echo.com\r\n"
            b"Connection: Close\r\n"
            b"Content-Type: application/json\r\n"
            b"Content-Length: 15\r\n"
            b"\r\n"
            b'{"foo" : "bar"}\r\n'
            b"\r\n"
        )

    def test_content_encoding_is_written_when_set(self) -> None:
        request = Request(
            url="http://example.com/",
            method=Method.PUT,
            content=b"\x1f\x8b",
            content_type="application/octet-stream",
            content_encoding="gzip",
        )
        raw = serialize(request)
        assert b"Content-Type: application/octet-stream\r\nContent-Encoding: gzip\r\nContent-Length: 2\r\n\r\n\x1f\x8b\r\n\r\n" in raw

    def test_empty_content_encoding_is_skipped(self) -> None:
        request = Request(url="http://example.com/", method=Method.POST, content="x", content_type="text/plain", content_encoding="")
        assert b"Content-Encoding" not in serialize(request)

    def test_explicit_content_length_is_used(self) -> None:
        request = Request(url="http://example.com/", method=Method.POST, content="hello", content_type="text/plain", content_length=3)
        assert b"Content-Length: 3\r\n" in serialize(request)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"content": "hello"},
            {"content_type": "text/plain"},
            {"content": "", "content_type": "text/plain"},
            {"content": "hello", "content_type": "text/plain", "content_length": 0},
        ],
    )
    def test_body_block_is_omitted(self, kwargs) -> None:
        raw = serialize(Request(url="http://example.com/", method=Method.POST, **kwargs))
        assert b"Content-Length" not in raw
        assert b"Content-Type" not in raw
        assert raw.endswith(b"Connection: Close\r\n\r\n")

    def test_body_on_get_is_not_rejected(self) -> None:
        raw = serialize(Request(url="http://example.com/", content="q", content_type="text/plain"))
        assert raw.startswith(b"GET / HTTP/1.1\r\n")
        assert b"Content-Length: 1\r\n" in raw

    def test_utf8_body_length_counts_bytes(self) -> None:
        request = Request(url="http://example.com/", method=Method.POST, content="hé", content_type="text/plain")
        assert b"Content-Length: 3\r\n" in serialize(request)
