"""Tests for header helpers."""

import pytest

from barehttp import Header, find_header
from barehttp.header import parse_header_line


class TestHeader:
    def test_serialize(self) -> None:
        assert Header("Accept", "*/*").serialize() == "Accept: */*"

    def test_is_type_ignores_case(self) -> None:
        assert Header("content-type", "text/plain").is_type("Content-Type")
        assert not Header("Content-Type", "text/plain").is_type("Content-Length")

    def test_find_header(self) -> None:
        headers = [Header("A", "1"), Header("b", "2"), Header("B", "3")]
        assert find_header(headers, "B") == Header("b", "2")
        assert find_header(headers, "C") is None


class TestParseHeaderLine:
    def test_name_and_value_are_stripped(self) -> None:
        assert parse_header_line("X-Trace :  abc ") == Header("X-Trace", "abc")

    def test_value_may_contain_colons(self) -> None:
        assert parse_header_line("Referer: http://a/b") == Header("Referer", "http://a/b")

    @pytest.mark.parametrize("line", ["no colon", ": value"])
    def test_malformed(self, line) -> None:
        with pytest.raises(ValueError):
            parse_header_line(line)
