"""
=============================================================================
FILE ENDPOINT
=============================================================================

Reads and writes files under a base directory:

    GET  /files/notes.txt   → 200 + file contents, or 404
    POST /files/notes.txt   → 201 after writing the request body, or 500

=============================================================================
PATH TRAVERSAL PROTECTION
=============================================================================

The file name comes straight from the URL, so it must never be allowed to
point outside the base directory:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /files/../../etc/passwd HTTP/1.1                               │
    │                                                                      │
    │  Without protection this reads:                                      │
    │  /srv/data/../../etc/passwd  →  /etc/passwd                          │
    │                                                                      │
    │  Our protection:                                                     │
    │  1. Resolve the full path (follow .. and symlinks)                   │
    │  2. Check it is still inside the base directory                      │
    │  3. If not, return 403 Forbidden                                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

        full_path = (base_dir / file_name).resolve()
        full_path.relative_to(base_dir)  # Raises if outside base_dir

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder,
    created, forbidden, internal_error, not_found,
)


logger = logging.getLogger(__name__)

URL_PREFIX = "/files/"
FILE_CONTENT_TYPE = "application/octet-stream"


class PathTraversalError(ValueError):
    """Raised when a file name resolves outside the base directory."""


class FileHandler:
    """
    Handler for the /files endpoint.

        files = FileHandler("/srv/data")
        router.add_route("/files", files.handle, prefix=True)

    Files are treated as text: a GET of a file that is not valid UTF-8 is
    reported as not found. Concurrent writes to the same name are not
    serialized; the last writer wins.
    """

    def __init__(self, directory: str):
        """
        Args:
            directory: Base directory. Every file name is resolved under it.

        Raises:
            ValueError: If the directory does not exist.
        """
        self.directory = Path(directory).resolve()

        if not self.directory.is_dir():
            raise ValueError(f"Base directory does not exist: {directory}")

    def resolve(self, file_name: str) -> Path:
        """
        Map a file name from the URL to a path inside the base directory.

        Raises:
            PathTraversalError: If the result would be outside the directory.
        """
        full_path = (self.directory / file_name).resolve()
        try:
            full_path.relative_to(self.directory)
        except ValueError:
            raise PathTraversalError(file_name) from None
        return full_path

    def read(self, file_name: str) -> Optional[str]:
        """
        Read a file as UTF-8 text.

        Returns:
            The file contents, or None if the file is missing, is a
            directory, cannot be read, or is not valid UTF-8.

        Raises:
            PathTraversalError: If the name escapes the base directory.
        """
        path = self.resolve(file_name)
        try:
            return path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            return None

    def write(self, file_name: str, body: Optional[bytes]) -> None:
        """
        Create or truncate a file and write the body to it.

        A missing body writes an empty file.

        Raises:
            PathTraversalError: If the name escapes the base directory.
            OSError: If the file cannot be written.
        """
        path = self.resolve(file_name)
        path.write_bytes(body or b"")
        logger.debug(f"Wrote {len(body or b'')} bytes to {path}")

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve GET and POST requests for /files/<name>.

        Other methods get 404, the same as a missing file.
        """
        file_name = request.path.removeprefix(URL_PREFIX)

        try:
            if request.method == "GET":
                return self._get(file_name)
            if request.method == "POST":
                return self._post(file_name, request.body)
        except PathTraversalError:
            logger.warning(f"Path traversal attempt: {file_name}")
            return forbidden()

        return not_found()

    def _get(self, file_name: str) -> HTTPResponse:
        content = self.read(file_name)
        if content is None:
            return not_found()

        return (ResponseBuilder()
            .content_type(FILE_CONTENT_TYPE)
            .body(content)
            .build())

    def _post(self, file_name: str, body: Optional[bytes]) -> HTTPResponse:
        try:
            self.write(file_name, body)
        except OSError as e:
            logger.error(f"Error writing file {file_name}: {e}")
            return internal_error()
        return created()
