"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All server settings live in one frozen dataclass. It is built once at
startup (from CLI flags or environment variables), validated, and then
passed explicitly to every component that needs it.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   CLI flags ───┐                                                     │
    │                ├──► ServerConfig ──► validate() ──► HTTPServer       │
    │   HTTP_* env ──┘     (frozen)                         │              │
    │                                                       ├── SocketServer
    │                                                       ├── ThreadPool │
    │                                                       └── FileHandler│
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(directory="/tmp/data", log_level="DEBUG")

    Behind a container port mapping:
        ServerConfig(host="0.0.0.0", workers=16)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 4221
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of connections the OS queues before refusing."""

    buffer_size: int = 1024
    """Bytes read per recv() call."""

    timeout: Optional[float] = 30.0
    """
    Socket read timeout in seconds. A client that stalls longer gets
    408 Request Timeout. None = block forever.
    """

    max_request_size: int = 1024 * 1024  # 1 MB
    """Largest request (headers + body) accepted; bigger gets 413."""

    # ─────────────────────────────────────────────────────────────────────
    # FILE ENDPOINT
    # ─────────────────────────────────────────────────────────────────────

    directory: str = "."
    """Base directory for /files/<name>. Must exist."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    workers: int = 5
    """Number of worker threads, fixed for the life of the server."""

    queue_size: int = 100
    """Connections allowed to wait for a worker; more get 503."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-like) or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

            HTTP_HOST       Server host (default: 127.0.0.1)
            HTTP_PORT       Server port (default: 4221)
            HTTP_DIRECTORY  Base directory for /files (default: .)
            HTTP_WORKERS    Worker threads (default: 5)
            HTTP_TIMEOUT    Read timeout in seconds (default: 30)
            HTTP_LOG_LEVEL  Logging level (default: INFO)

        Example:
            HTTP_PORT=8080 HTTP_LOG_LEVEL=DEBUG python -m minihttpd
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            directory=os.getenv("HTTP_DIRECTORY", "."),
            workers=int(os.getenv("HTTP_WORKERS", "5")),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> None:
        """
        Validate configuration values at startup.

        Raises:
            ValueError: Describing the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log format: {self.log_format}")

        if not Path(self.directory).is_dir():
            raise ValueError(f"Directory does not exist: {self.directory}")
