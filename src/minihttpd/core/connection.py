"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps an accepted client socket for exactly one request/response cycle.

=============================================================================
TCP IS A STREAM, NOT MESSAGES
=============================================================================

A single recv() can return half a request, or a request and a half.
We therefore read in buffer_size chunks until the request is complete:

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │   recv(1024) → b"POST /files/a.txt HTTP/1.1\r\nContent-Le"        │
    │   recv(1024) → b"ngth: 5\r\n\r\nhel"                               │
    │                             ────────                             │
    │                             headers complete, 3 of 5 body bytes  │
    │   recv(1024) → b"lo"                                              │
    │                 ──                                               │
    │                 body complete → return the whole request         │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

There is no keep-alive: after the response is written the connection is
closed.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING
     │             │                                  │
     │             ▼                                  │
     └──────────► CLOSING ◄───────────────────────────┘
                    │
                    ▼
                  CLOSED

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid


logger = logging.getLogger(__name__)

HEADER_TERMINATOR = b"\r\n\r\n"
CLOSE_DRAIN_TIMEOUT = 0.5
REJECT_SEND_TIMEOUT = 0.5
REJECT_DISCARD_CHUNKS = 64


class ConnectionState(Enum):
    """Where a connection is in its single request/response cycle."""

    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


class RequestTooLargeError(ValueError):
    """Raised when a request grows beyond max_request_size while reading."""


@dataclass
class Connection:
    """
    Represents a client connection.

    Typical use from a worker thread:

        with Connection(sock, addr, buffer_size=1024, timeout=30.0) as conn:
            data = conn.read_request()
            ...
            conn.send_response(response.to_bytes())
        # Connection closed here

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for logs.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (from ServerConfig)
    buffer_size: int = 1024                  # Bytes per recv() call
    timeout: Optional[float] = 30.0          # Read timeout, None = block forever
    max_request_size: int = 1024 * 1024      # Hard cap on request bytes

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request from the socket.

        Reads until the blank line that ends the headers, then until
        Content-Length body bytes have arrived. A request without
        Content-Length is returned as soon as its headers are complete,
        including any body bytes that came with them.

        Returns:
            The request bytes. If the client closed the connection part way
            through, whatever arrived is returned so the parser can reject
            it. None if the client closed without sending anything.

        Raises:
            TimeoutError: If the client stops sending for `timeout` seconds.
            RequestTooLargeError: If the request exceeds max_request_size.
        """
        self.state = ConnectionState.READING

        try:
            # STEP 1: headers
            while HEADER_TERMINATOR not in self._buffer:
                if not self._fill():
                    return self._buffer or None

            # STEP 2: body. Without Content-Length, whatever already arrived
            # after the blank line is the body.
            header_end = self._buffer.find(HEADER_TERMINATOR)
            body_start = header_end + len(HEADER_TERMINATOR)
            content_length = self._parse_content_length(self._buffer[:header_end])
            if content_length is None:
                return self._buffer

            request_end = body_start + content_length
            if request_end > self.max_request_size:
                raise RequestTooLargeError(
                    f"Request too large: {request_end} bytes declared"
                )

            while len(self._buffer) < request_end:
                if not self._fill():
                    break  # Client closed mid-body; keep what we have

            return self._buffer[:request_end]

        except socket.timeout:
            raise TimeoutError("Request read timeout") from None
        finally:
            self.state = ConnectionState.PROCESSING

    def _fill(self) -> bool:
        """
        Append one recv() worth of data to the buffer.

        Returns:
            False if the client closed the connection.
        """
        chunk = self._recv()
        if not chunk:
            return False

        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLargeError(
                f"Request too large: {len(self._buffer)} bytes"
            )
        return True

    def _recv(self) -> bytes:
        """socket.recv() that reports an abrupt disconnect as end of stream."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, headers: bytes) -> Optional[int]:
        """
        Find Content-Length in raw header bytes.

        This runs before the request is parsed, so it does its own
        case-insensitive search. Returns None when the header is missing
        or not a number.
        """
        header_str = headers.decode("utf-8", errors="replace").lower()
        for line in header_str.split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(int(line.split(":", 1)[1].strip()), 0)
                except ValueError:
                    return None
        return None

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the full response with sendall().

        Returns:
            True if sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Send FIN, read until the peer closes or CLOSE_DRAIN_TIMEOUT passes,
        then release the socket. Safe to call twice.
        """
        if self.state == ConnectionState.CLOSED:
            return
        self.state = ConnectionState.CLOSING

        for step in (self._half_close, self._drain, self.socket.close):
            try:
                step()
            except OSError:
                pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def reject(self, data: bytes, send_timeout: float = REJECT_SEND_TIMEOUT):
        """
        Send `data` and close without waiting on the peer.

        Used on the accept thread, which must never block on a client:
        the send gives up after send_timeout, only bytes already received
        are discarded, and the socket is closed at once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.settimeout(send_timeout)
        except OSError:
            pass
        self.send_response(data)

        self.state = ConnectionState.CLOSING
        for step in (self._discard_received, self._full_close, self.socket.close):
            try:
                step()
            except OSError:
                pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection rejected after {self.age:.3f}s")

    def _discard_received(self):
        self.socket.setblocking(False)
        for _ in range(REJECT_DISCARD_CHUNKS):
            if not self.socket.recv(self.buffer_size):
                break

    def _full_close(self):
        self.socket.shutdown(socket.SHUT_RDWR)

    def _half_close(self):
        self.socket.shutdown(socket.SHUT_WR)

    def _drain(self):
        self.socket.settimeout(CLOSE_DRAIN_TIMEOUT)
        while self.socket.recv(self.buffer_size):
            pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
