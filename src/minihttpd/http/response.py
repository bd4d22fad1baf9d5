"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.1 200 OK\r\n                     ← STATUS LINE              │
    │   Content-Type: text/plain\r\n            ← HEADERS (in order added) │
    │   Content-Encoding: gzip\r\n                                         │
    │   Content-Length: 23\r\n                                             │
    │   \r\n                                    ← BLANK LINE               │
    │   <23 bytes of gzip data>                 ← BODY                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Serialization is literal: only the headers a handler set are written.
Nothing is added behind the handler's back, so a bare 200 is exactly

    b"HTTP/1.1 200 OK\\r\\n\\r\\n"

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type("text/plain")
        .body(b"abc")              # also sets Content-Length: 3
        .build())

Each method returns `self`, except build() and to_bytes().

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Union

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    A plain data container; use ResponseBuilder to construct one.

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: HTTPStatus = HTTPStatus.OK       # HTTP status code (enum)
    headers: Dict[str, str] = field(default_factory=dict)  # Ordered headers
    body: bytes = b""                        # Response body
    version: str = "HTTP/1.1"                # HTTP version

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for socket.sendall().

        Returns:
            Status line, header lines, blank line, then the body bytes.
        """
        lines = [self.status_line]

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    USAGE EXAMPLES

        # Plain text
        response = ResponseBuilder().text("abc").build()

        # Pre-encoded body
        response = (ResponseBuilder()
            .content_type("text/plain")
            .content_encoding("gzip")
            .body(compressed)
            .build())

        # Bare status
        response = ResponseBuilder().status(HTTPStatus.CREATED).build()
    """

    def __init__(self):
        self._status = HTTPStatus.OK           # Default to 200 OK
        self._headers: Dict[str, str] = {}     # Headers, in insertion order
        self._body: bytes = b""                # Response body

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """
        Add a single response header.

        Headers are written in the order they are first added.
        """
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Set the Content-Type header."""
        return self.header("Content-Type", content_type)

    def content_encoding(self, encoding: str) -> "ResponseBuilder":
        """Set the Content-Encoding header (e.g. "gzip")."""
        return self.header("Content-Encoding", encoding)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body and its Content-Length.

        Strings are encoded as UTF-8. Content-Length is always the length
        in bytes of what will actually be sent, so for compressed bodies
        pass the compressed bytes.

        Args:
            body: Response body

        Returns:
            Self for method chaining
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body
        self._headers["Content-Length"] = str(len(body))
        return self

    def text(self, text: str, content_type: str = "text/plain") -> "ResponseBuilder":
        """Set a plain text body with Content-Type and Content-Length."""
        return self.content_type(content_type).body(text)

    def build(self) -> HTTPResponse:
        """Build and return the HTTPResponse object."""
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response to bytes in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Quick one-liners for common responses. Error responses carry no body:
# the status line says everything the client needs.
#
#     return ok("abc")
#     return not_found()
#
# =============================================================================

def ok(body: Union[str, bytes, None] = None, content_type: str = "text/plain") -> HTTPResponse:
    """
    Create a 200 OK response.

    With no body this is the bare status line and blank line, nothing else.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if body is not None:
        builder.content_type(content_type).body(body)
    return builder.build()


def created() -> HTTPResponse:
    """Create a 201 Created response."""
    return empty_response(HTTPStatus.CREATED)


def empty_response(status: HTTPStatus) -> HTTPResponse:
    """Create a bodyless response with just a status line."""
    return ResponseBuilder().status(status).build()


def bad_request() -> HTTPResponse:
    """Create a 400 Bad Request response."""
    return empty_response(HTTPStatus.BAD_REQUEST)


def forbidden() -> HTTPResponse:
    """Create a 403 Forbidden response."""
    return empty_response(HTTPStatus.FORBIDDEN)


def not_found() -> HTTPResponse:
    """Create a 404 Not Found response."""
    return empty_response(HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """
    Create a 500 Internal Server Error response.

    Details stay in the server log, never in the response.
    """
    return empty_response(HTTPStatus.INTERNAL_SERVER_ERROR)


def service_unavailable() -> HTTPResponse:
    """Create a 503 Service Unavailable response."""
    return empty_response(HTTPStatus.SERVICE_UNAVAILABLE)
