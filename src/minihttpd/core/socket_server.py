"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

The listening socket and nothing else. Every accepted client is wrapped in
a Connection and passed to a callback; the callback decides what happens
next (in HTTPServer it is queued on the worker pool).

    ┌─────────────────────────────────────────────────────────────────┐
    │                                                                  │
    │   _bind()  socket → SO_REUSEADDR → bind → listen                 │
    │      │                                                           │
    │      ▼                                                           │
    │   _accept_loop()                                                 │
    │      accept() returns every ACCEPT_POLL_INTERVAL seconds         │
    │      at the latest, so a shutdown() is noticed promptly.         │
    │                                                                  │
    │      socket.timeout  ──► poll again                              │
    │      OSError         ──► logged, poll again                      │
    │      (sock, addr)    ──► on_connection(Connection(...))          │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

SIGINT and SIGTERM call shutdown(). CPython only lets the main thread
install signal handlers, so a server started from any other thread skips
them; whoever started it calls shutdown() instead.

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Dict, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

ACCEPT_POLL_INTERVAL = 1.0

ConnectionCallback = Callable[[Connection], None]


class SocketServer:
    """
    Accepts TCP clients on config.host:config.port.

        server = SocketServer(config)
        server.start(lambda conn: pool.submit(process, args=(conn,)))
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False
        self._ready_event = threading.Event()
        self._previous_handlers: Dict[int, object] = {}

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) while listening, else the configured pair."""
        if self._socket is not None:
            try:
                return self._socket.getsockname()[:2]
            except OSError:
                pass
        return (self.config.host, self.config.port)

    def start(self, on_connection: ConnectionCallback):
        """
        Listen and accept until shutdown(). Blocks.

        Raises:
            OSError: The address could not be bound.
        """
        self._socket = self._bind()
        self._running = True
        self._install_signal_handlers()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(on_connection)
        finally:
            self._close()

    def shutdown(self):
        """Ask the accept loop to stop. Idempotent and signal-safe."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """True once the socket is listening; False if `timeout` passes first."""
        return self._ready_event.wait(timeout)

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(ACCEPT_POLL_INTERVAL)

        try:
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            sock.close()
            raise

        return sock

    def _accept_loop(self, on_connection: ConnectionCallback):
        while self._running:
            try:
                client, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            on_connection(Connection(
                socket=client,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            ))

    def _install_signal_handlers(self):
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, skipping signal handlers")
            return

        def on_signal(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        for signum in (signal.SIGTERM, signal.SIGINT):
            self._previous_handlers[signum] = signal.signal(signum, on_signal)

    def _close(self):
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

        if self._socket is not None:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        logger.info("Socket server stopped")
