"""
Unit tests for Connection reading and writing, over a local socket pair.
"""

import socket
import threading
import time

import pytest

from minihttpd.core.connection import Connection, ConnectionState, RequestTooLargeError


@pytest.fixture
def sockets():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for s in (server_side, client_side):
        try:
            s.close()
        except OSError:
            pass


def make_connection(sock, **kwargs) -> Connection:
    kwargs.setdefault("timeout", 2.0)
    return Connection(socket=sock, address=("127.0.0.1", 50000), **kwargs)


class TestReadRequest:
    """Tests for Connection.read_request."""

    def test_headers_only(self, sockets):
        server_side, client_side = sockets
        client_side.sendall(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")

        conn = make_connection(server_side)

        assert conn.read_request() == b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"

    def test_body_in_small_chunks(self, sockets):
        """Requests larger than one recv() are reassembled."""
        server_side, client_side = sockets
        request = (
            b"POST /files/a.txt HTTP/1.1\r\n"
            b"Content-Length: 10\r\n"
            b"\r\n"
            b"0123456789"
        )

        def send_slowly():
            for i in range(0, len(request), 7):
                client_side.sendall(request[i:i + 7])

        sender = threading.Thread(target=send_slowly)
        sender.start()

        conn = make_connection(server_side, buffer_size=8)
        data = conn.read_request()
        sender.join()

        assert data == request

    def test_content_length_case_insensitive(self, sockets):
        server_side, client_side = sockets
        client_side.sendall(b"POST / HTTP/1.1\r\ncontent-length: 3\r\n\r\nabc")

        assert make_connection(server_side).read_request().endswith(b"\r\n\r\nabc")

    def test_body_without_content_length(self, sockets):
        """Bytes after the blank line are kept when no length is declared."""
        server_side, client_side = sockets
        client_side.sendall(b"POST /files/a.txt HTTP/1.1\r\n\r\nhello")

        data = make_connection(server_side).read_request()

        assert data == b"POST /files/a.txt HTTP/1.1\r\n\r\nhello"

    def test_invalid_content_length_keeps_body(self, sockets):
        server_side, client_side = sockets
        client_side.sendall(b"POST / HTTP/1.1\r\nContent-Length: lots\r\n\r\nabc")

        assert make_connection(server_side).read_request().endswith(b"\r\n\r\nabc")

    def test_client_closes_without_data(self, sockets):
        server_side, client_side = sockets
        client_side.close()

        assert make_connection(server_side).read_request() is None

    def test_client_closes_mid_headers(self, sockets):
        """Partial data is returned so the parser can reject it."""
        server_side, client_side = sockets
        client_side.sendall(b"GET /")
        client_side.shutdown(socket.SHUT_WR)

        assert make_connection(server_side).read_request() == b"GET /"

    def test_client_closes_mid_body(self, sockets):
        server_side, client_side = sockets
        client_side.sendall(b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc")
        client_side.shutdown(socket.SHUT_WR)

        data = make_connection(server_side).read_request()

        assert data.endswith(b"\r\n\r\nabc")

    def test_timeout(self, sockets):
        server_side, client_side = sockets
        client_side.sendall(b"GET / HTTP/1.1\r\n")

        conn = make_connection(server_side, timeout=0.2)

        with pytest.raises(TimeoutError):
            conn.read_request()

    def test_too_large_headers(self, sockets):
        server_side, client_side = sockets
        client_side.sendall(b"GET / HTTP/1.1\r\nX-Big: " + b"x" * 500)

        conn = make_connection(server_side, buffer_size=64, max_request_size=256)

        with pytest.raises(RequestTooLargeError):
            conn.read_request()

    def test_too_large_declared_body(self, sockets):
        server_side, client_side = sockets
        client_side.sendall(b"POST / HTTP/1.1\r\nContent-Length: 999999\r\n\r\n")

        conn = make_connection(server_side, max_request_size=1024)

        with pytest.raises(RequestTooLargeError):
            conn.read_request()


class TestSendAndClose:

    def test_send_response(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n") is True
        assert client_side.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_close_sends_eof(self, sockets):
        server_side, client_side = sockets

        with make_connection(server_side) as conn:
            conn.send_response(b"done")
            client_side.shutdown(socket.SHUT_WR)

        assert conn.state == ConnectionState.CLOSED
        assert client_side.recv(1024) == b"done"
        assert client_side.recv(1024) == b""

    def test_close_is_idempotent(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_send_after_close_fails(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)
        conn.close()

        assert conn.send_response(b"late") is False

    def test_reject_sends_and_closes(self, sockets):
        server_side, client_side = sockets
        conn = make_connection(server_side)

        conn.reject(b"HTTP/1.1 503 Service Unavailable\r\n\r\n")

        assert conn.state == ConnectionState.CLOSED
        assert client_side.recv(1024) == b"HTTP/1.1 503 Service Unavailable\r\n\r\n"
        assert client_side.recv(1024) == b""

    def test_reject_does_not_wait_for_peer(self, sockets):
        """A client that keeps sending cannot hold up reject()."""
        server_side, client_side = sockets
        stop = threading.Event()

        def trickle():
            try:
                while not stop.is_set():
                    client_side.sendall(b"x")
                    time.sleep(0.05)
            except OSError:
                pass

        sender = threading.Thread(target=trickle, daemon=True)
        sender.start()
        try:
            time.sleep(0.1)
            started = time.monotonic()
            make_connection(server_side).reject(b"busy")
            elapsed = time.monotonic() - started
        finally:
            stop.set()
            sender.join(timeout=2.0)

        assert elapsed < 1.0
