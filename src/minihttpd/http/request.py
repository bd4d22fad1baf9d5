"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into structured HTTPRequest objects.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /files/notes.txt HTTP/1.1\r\n      ← REQUEST LINE             │
    │   ─┬── ────────┬─────── ───┬────                                     │
    │    │           │           │                                         │
    │  Method       Path      Version                                      │
    │                                                                      │
    │   Host: localhost:4221\r\n                ← HEADERS                  │
    │   User-Agent: curl/8.4.0\r\n                "Name: Value" lines      │
    │   Content-Length: 5\r\n                                              │
    │   \r\n                                    ← BLANK LINE (separator)   │
    │   hello                                   ← BODY (verbatim bytes)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

1. The request line is split on single spaces and must yield exactly
   three tokens. Tokens are kept verbatim: no percent-decoding of the
   path and no validation of the version string.

2. Header lines are split at the first ": " (colon + space). Header
   names keep their original spelling; a repeated name overwrites the
   earlier value. Lines without ": " are skipped.

3. Header parsing stops at the first blank line. Everything after it is
   the body, byte-for-byte, even if it contains ": " or several lines.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


HEADER_TERMINATOR = b"\r\n\r\n"
HEADER_SEPARATOR = ": "


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the HTTP status code that should be returned to the client:

        400 Bad Request       - Malformed request line
        408 Request Timeout   - Client stopped sending mid-request
        413 Payload Too Large - Request exceeds size limit
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code  # HTTP status to return


@dataclass
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    The request line lives in dedicated attributes and the headers in their
    own dictionary, so a client header that happens to be called "Path" or
    "Body" never shadows request data.

    Attributes:
        method:         The HTTP method, verbatim ("GET", "POST", ...)
        path:           The request target, verbatim ("/echo/abc")
        version:        The version token, verbatim ("HTTP/1.1")
        headers:        Header name → value, names as sent by the client
        body:           Bytes after the blank line, or None if there were none
        client_address: (ip, port) of the client, for logging
        raw:            The original unparsed request bytes
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    client_address: tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a header value with a case-insensitive name lookup.

        Names are stored as the client sent them, so "user-agent" and
        "User-Agent" both find a header sent as "User-Agent". If the client
        sent the same header twice with different spelling, the one that
        came last wins, matching the overwrite rule for exact duplicates.

        Args:
            name: Header name (any case)
            default: Value to return if the header is absent

        Returns:
            Header value or default
        """
        wanted = name.lower()
        value = default
        for key, candidate in self.headers.items():
            if key.lower() == wanted:
                value = candidate
        return value

    @property
    def user_agent(self) -> Optional[str]:
        """The User-Agent header value, or None when the client sent none."""
        return self.get_header("User-Agent")

    @property
    def accept_encoding(self) -> Optional[str]:
        """The raw Accept-Encoding header value, or None."""
        return self.get_header("Accept-Encoding")


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw Request Bytes
              │
              ▼
        1. Size check ─────────── too large? → HTTPParseError(413)
              │
        2. Split head / body at the first \\r\\n\\r\\n
              │
        3. Request line ───────── not 3 tokens? → HTTPParseError(400)
              │
        4. Header lines ───────── "Name: Value", malformed lines skipped
              │
              ▼
        HTTPRequest
    """

    def __init__(self, max_request_size: int = 1024 * 1024):
        """
        Initialize the request parser.

        Args:
            max_request_size: Maximum allowed request size in bytes.
                              Larger requests are rejected with 413.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw HTTP request bytes from socket.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest object.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413
            )

        # ─────────────────────────────────────────────────────────────────
        # SPLIT HEAD AND BODY
        # ─────────────────────────────────────────────────────────────────
        # A request cut short before the blank line has no body; whatever
        # arrived is still parsed as request line + headers.
        head, separator, rest = data.partition(HEADER_TERMINATOR)
        body = rest if separator and rest else None

        # Lossy decode: invalid UTF-8 in the head becomes U+FFFD instead
        # of failing the whole request.
        lines = head.decode("utf-8", errors="replace").split("\r\n")

        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split the request line into (method, path, version).

        Raises:
            HTTPParseError: If the line does not have exactly three tokens.
        """
        if not line:
            raise HTTPParseError("Empty request")

        tokens = line.split(" ")
        if len(tokens) != 3:
            raise HTTPParseError(f"Malformed request line: {line!r}")

        method, path, version = tokens
        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: Value" lines into a dictionary.

        Args:
            lines: Header lines (request line and blank line excluded).

        Returns:
            Dictionary of header name → value, in arrival order.
        """
        headers: Dict[str, str] = {}

        for line in lines:
            name, separator, value = line.partition(HEADER_SEPARATOR)
            if not separator:
                continue  # Not a header line (lenient parsing)

            # Later duplicates overwrite; no comma-merging of values.
            headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 1024 * 1024
) -> HTTPRequest:
    """
    Convenience function to parse an HTTP request.

    Use RequestParser directly if you need to parse multiple requests
    with the same settings.
    """
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(data, client_address)
