"""
Small text endpoints: the root path, echo, and user-agent reflection.

    GET /                    → 200, nothing else
    GET /echo/abc            → 200, body "abc" (gzip if the client allows it)
    GET /user-agent          → 200, body = the User-Agent header
"""

from ..http.encoding import SUPPORTED_ENCODING, gzip_compress, supports_gzip
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, bad_request, ok


ECHO_PREFIX = "/echo/"
TEXT_CONTENT_TYPE = "text/plain"


def index(request: HTTPRequest) -> HTTPResponse:
    """Root path: a bare 200 with no headers and no body."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Send back the part of the path after "/echo/".

    When the client's Accept-Encoding lists gzip, the body is compressed
    and Content-Length is the compressed size:

        HTTP/1.1 200 OK
        Content-Type: text/plain
        Content-Encoding: gzip
        Content-Length: 23
    """
    text = request.path.removeprefix(ECHO_PREFIX)

    builder = ResponseBuilder().content_type(TEXT_CONTENT_TYPE)

    if supports_gzip(request.accept_encoding):
        return (builder
            .content_encoding(SUPPORTED_ENCODING)
            .body(gzip_compress(text.encode("utf-8")))
            .build())

    return builder.body(text).build()


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """Reflect the User-Agent header; 400 if the client sent none."""
    agent = request.user_agent
    if agent is None:
        return bad_request()
    return ok(agent, content_type=TEXT_CONTENT_TYPE)
