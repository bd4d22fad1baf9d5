"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One line per request on the "minihttpd.access" logger, in either of two
shapes:

    text:  127.0.0.1 - - [18/Oct/2026:14:03:11 +0000] "GET /echo/abc HTTP/1.1" 200 3 0.41ms
    json:  {"request_id": "3f2a9c1d", "method": "GET", "path": "/echo/abc", ...}

Route it on its own with the usual logging calls:

    logging.getLogger("minihttpd.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass
from typing import Iterable, Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("minihttpd.access")

TIMESTAMP_FORMAT = "%d/%b/%Y:%H:%M:%S %z"


@dataclass
class RequestLog:
    """What gets recorded about a finished request."""

    request_id: str
    method: str
    path: str
    version: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @classmethod
    def capture(
        cls,
        request: HTTPRequest,
        response: HTTPResponse,
        request_id: str,
        duration_ms: float,
    ) -> "RequestLog":
        return cls(
            request_id=request_id,
            method=request.method,
            path=request.path,
            version=request.version,
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime(TIMESTAMP_FORMAT),
        )

    def to_dict(self) -> dict:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        # Common Log Format plus a trailing duration
        request_line = f"{self.method} {self.path} {self.version}"
        return (
            f'{self.client_ip} - - [{self.timestamp}] "{request_line}" '
            f"{self.status_code} {self.content_length} {self.duration_ms:.2f}ms"
        )


class LoggingMiddleware(Middleware):
    """
    Times the rest of the chain and writes an access log line.

    Register it first so the duration covers every other middleware.
    Responses with status >= 400 go out at WARNING regardless of log_level.
    A handler exception is logged at ERROR and re-raised untouched.

    Args:
        log_format: "text" or "json"
        log_level: Level used for non-error responses
        skip_paths: Exact paths to leave out of the log
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
        skip_paths: Optional[Iterable[str]] = None,
    ):
        self.log_format = log_format
        self.log_level = log_level
        self.skip_paths = frozenset(skip_paths or ())

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        request_id = uuid.uuid4().hex[:8]
        started = time.perf_counter()

        try:
            response = next(request)
        except Exception as e:
            logger.error(
                f"[{request_id}] {request.method} {request.path} raised "
                f"{type(e).__name__}: {e} after {self._elapsed_ms(started):.2f}ms"
            )
            raise

        if request.path not in self.skip_paths:
            entry = RequestLog.capture(request, response, request_id, self._elapsed_ms(started))
            level = logging.WARNING if response.status >= 400 else self.log_level
            logger.log(level, self._render(entry))

        return response

    def _render(self, entry: RequestLog) -> str:
        if self.log_format == "json":
            return json.dumps(entry.to_dict())
        return entry.to_text()

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return (time.perf_counter() - started) * 1000
