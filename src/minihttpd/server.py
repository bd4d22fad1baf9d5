"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   _handle_connection(conn) ──► ThreadPool.submit()                   │
    │                                   │         └── queue full → 503     │
    │                                   ▼                                  │
    │   _process_connection(conn)   (worker thread)                        │
    │        │                                                             │
    │        ├── conn.read_request()   timeout → 408, too large → 413      │
    │        ├── RequestParser.parse() malformed → 400                     │
    │        ├── middleware + router   exception → 500                     │
    │        ├── conn.send_response()                                      │
    │        └── conn.close()          one request per connection          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import threading
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool, RequestTooLargeError
from .core.connection import ConnectionState
from .handlers import FileHandler, echo, index, user_agent
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus, Router,
    empty_response, internal_error, service_unavailable,
)
from .middleware import MiddlewarePipeline, Middleware, LoggingMiddleware


logger = logging.getLogger(__name__)

# Bounded wait for queued connections when the server stops
SHUTDOWN_TIMEOUT = 5.0


class HTTPServer:
    """
    Multi-threaded HTTP/1.1 server, one request per connection.

        server = HTTPServer(ServerConfig(port=8080))

        @server.route("/ping")
        def ping(request):
            return ok("pong")

        server.use(LoggingMiddleware())
        server.run()   # Blocks until SIGINT/SIGTERM or shutdown()

    create_app() returns a server with the standard routes registered.
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if omitted.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            workers=self.config.workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._router = Router()
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), built in run()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware. The first added is the outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    def route(self, path: str, prefix: bool = False, name: Optional[str] = None):
        """Decorator registering a route handler, see Router.route()."""
        return self._router.route(path, prefix, name)

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port), or the configured one before run()."""
        return self._socket_server.address

    @property
    def stats(self) -> dict:
        return self._thread_pool.stats

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server. Blocks until shutdown.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._setup_logging()

        self._handler = self._middleware.wrap(self._router.handle)
        self._thread_pool.start()

        logger.info(
            f"Starting HTTP server on {self.config.host}:{self.config.port} "
            f"({self.config.workers} workers, directory {self.config.directory})"
        )
        for route in self._router.routes:
            kind = "prefix" if route.prefix else "exact"
            logger.debug(f"Route {route.path!r} ({kind}) → {route.name}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """
        Ask a running server to stop.

        The accept loop exits within a second; run() then drains queued
        connections and returns. Safe to call from any thread.
        """
        self._socket_server.shutdown()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # No-op if the application already configured the root logger
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttpd").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._thread_pool.shutdown(wait=True, timeout=SHUTDOWN_TIMEOUT)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Hand a new connection to the worker pool (accept thread)."""
        try:
            submitted = self._thread_pool.submit(
                self._process_connection,
                args=(conn,),
                block=False,
            )
        except RuntimeError:
            submitted = False  # Pool already stopping

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            conn.reject(service_unavailable().to_bytes())

    def _process_connection(self, conn: Connection):
        """Read, dispatch and answer one request (worker thread)."""
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError:
                logger.warning(f"[{conn.id}] Request read timeout")
                self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT)
                return
            except RequestTooLargeError as e:
                logger.warning(f"[{conn.id}] {e}")
                self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE)
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return

            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.info(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                self._send_error(conn, HTTPStatus(e.status_code))
                return

            logger.debug(
                f"[{conn.id}] {request.method} {request.path} "
                f"handled by {threading.current_thread().name}"
            )

            conn.state = ConnectionState.PROCESSING
            try:
                response = self._handler(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                response = internal_error()

            conn.send_response(response.to_bytes())

    def _send_error(self, conn: Connection, status: HTTPStatus):
        """Send a bodyless error response (before or instead of a handler)."""
        conn.send_response(empty_response(status).to_bytes())


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server with the standard routes, in matching order:

        /             exact    → 200, empty
        /echo         prefix   → echo the rest of the path (gzip aware)
        /files        prefix   → read/write files under config.directory
        /user-agent   exact    → reflect the User-Agent header
        anything else          → 404

    Access logging is added as middleware in config.log_format.
    """
    server = HTTPServer(config)
    files = FileHandler(server.config.directory)

    server.router.add_route("/", index)
    server.router.add_route("/echo", echo, prefix=True)
    server.router.add_route("/files", files.handle, prefix=True, name="files")
    server.router.add_route("/user-agent", user_agent)

    server.use(LoggingMiddleware(log_format=server.config.log_format))
    return server
