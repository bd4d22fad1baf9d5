"""
Unit tests for HTTP request parsing.
"""

import pytest

from minihttpd.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/echo/abc"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.raw == sample_get_request

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed with their names as sent."""
        request = parse_request(sample_get_request)

        assert request.headers["Host"] == "localhost:4221"
        assert request.headers["User-Agent"] == "pytest"
        assert request.user_agent == "pytest"
        assert request.accept_encoding == "deflate, gzip"

    def test_no_body_without_content(self, sample_get_request: bytes):
        """Nothing after the blank line means no body."""
        request = parse_request(sample_get_request)
        assert request.body is None

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing POST request with a body."""
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.path == "/files/test.txt"
        assert request.body == b"hello"

    def test_body_containing_header_separator(self):
        """A body line that looks like a header stays part of the body."""
        body = b"key: value\r\nsecond line"
        request = parse_request(
            b"POST /files/a.txt HTTP/1.1\r\n"
            b"Content-Length: 23\r\n"
            b"\r\n" + body
        )

        assert request.body == body
        assert "key" not in request.headers

    def test_tokens_kept_verbatim(self):
        """No percent-decoding of the path, no version validation."""
        request = parse_request(b"FETCH /echo/a%20b HTTP/9.9\r\n\r\n")

        assert request.method == "FETCH"
        assert request.path == "/echo/a%20b"
        assert request.version == "HTTP/9.9"

    def test_request_without_blank_line(self):
        """A head cut short still parses; there is simply no body."""
        request = parse_request(b"GET / HTTP/1.1\r\nHost: x")

        assert request.path == "/"
        assert request.headers == {"Host": "x"}
        assert request.body is None

    def test_duplicate_headers_overwrite(self):
        """Later occurrences of a header replace earlier ones."""
        request = parse_request(
            b"GET / HTTP/1.1\r\n"
            b"X-Thing: first\r\n"
            b"X-Thing: second\r\n"
            b"\r\n"
        )
        assert request.headers["X-Thing"] == "second"

    def test_header_split_at_first_separator(self):
        """Only the first ': ' separates name from value."""
        request = parse_request(b"GET / HTTP/1.1\r\nX-Note: a: b\r\n\r\n")
        assert request.headers["X-Note"] == "a: b"

    def test_malformed_header_lines_skipped(self):
        """Lines without ': ' are ignored."""
        request = parse_request(
            b"GET / HTTP/1.1\r\n"
            b"NoSeparator\r\n"
            b"Host:tight\r\n"
            b"User-Agent: ok\r\n"
            b"\r\n"
        )
        assert request.headers == {"User-Agent": "ok"}

    def test_header_named_like_request_field(self):
        """A header called Path does not change the request path."""
        request = parse_request(b"GET /echo/x HTTP/1.1\r\nPath: /evil\r\n\r\n")

        assert request.path == "/echo/x"
        assert request.headers["Path"] == "/evil"

    def test_invalid_utf8_in_head_is_replaced(self):
        """Undecodable bytes in the head do not fail the request."""
        request = parse_request(b"GET / HTTP/1.1\r\nUser-Agent: \xff\xfe\r\n\r\n")
        assert request.user_agent == "\ufffd\ufffd"

    @pytest.mark.parametrize("line", [
        b"GET /\r\n\r\n",
        b"GET\r\n\r\n",
        b"GET / HTTP/1.1 extra\r\n\r\n",
        b"GET  / HTTP/1.1\r\n\r\n",
    ])
    def test_malformed_request_line(self, line: bytes):
        """Anything but exactly three space-separated tokens is a 400."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(line)
        assert exc_info.value.status_code == 400

    def test_empty_request(self):
        """Test that empty request raises error."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"")
        assert exc_info.value.status_code == 400

    def test_request_too_large(self):
        """Test that oversized requests are rejected."""
        parser = RequestParser(max_request_size=100)
        large_request = b"GET / HTTP/1.1\r\n" + b"X-Header: " + b"x" * 200 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(large_request)
        assert exc_info.value.status_code == 413


class TestHTTPRequest:
    """Tests for HTTPRequest class."""

    def test_get_header_case_insensitive(self):
        """Test case-insensitive header lookup."""
        request = HTTPRequest(
            method="GET",
            path="/",
            headers={"User-Agent": "curl/8.4.0"},
        )

        assert request.get_header("user-agent") == "curl/8.4.0"
        assert request.get_header("USER-AGENT") == "curl/8.4.0"
        assert request.get_header("missing") is None
        assert request.get_header("missing", "default") == "default"

    def test_get_header_last_spelling_wins(self):
        request = HTTPRequest(
            method="GET",
            path="/",
            headers={"user-agent": "first", "User-Agent": "second"},
        )
        assert request.user_agent == "second"

    def test_missing_optional_headers(self):
        request = HTTPRequest(method="GET", path="/")

        assert request.user_agent is None
        assert request.accept_encoding is None
