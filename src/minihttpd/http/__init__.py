"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Translates raw TCP bytes into structured requests and structured responses
back into bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │   b"GET /echo/abc HTTP/1.1\\r\\n..."  →  HTTPRequest                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │ ROUTER (router.py)                                                  │
    │   HTTPRequest.path  →  handler function (exact or prefix rules)     │
    ├─────────────────────────────────────────────────────────────────────┤
    │ CONTENT NEGOTIATION (encoding.py)                                   │
    │   Accept-Encoding  →  gzip or identity                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE BUILDER (response.py)                                      │
    │   HTTPResponse  →  b"HTTP/1.1 200 OK\\r\\n..."                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │ STATUS CODES (status_codes.py)                                      │
    │   HTTPStatus.NOT_FOUND → 404, phrase "Not Found"                    │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .encoding import gzip_compress, supports_gzip
from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                   # 200 OK
    created,              # 201 Created
    bad_request,          # 400 Bad Request
    forbidden,            # 403 Forbidden
    not_found,            # 404 Not Found
    internal_error,       # 500 Internal Server Error
    service_unavailable,  # 503 Service Unavailable
    empty_response,       # Any other bodyless status
)
from .router import Router, Route
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "bad_request",
    "forbidden",
    "not_found",
    "internal_error",
    "service_unavailable",
    "empty_response",

    # Content negotiation
    "supports_gzip",
    "gzip_compress",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",
]
