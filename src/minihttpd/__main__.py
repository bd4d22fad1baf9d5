"""
=============================================================================
MINIHTTPD CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:4221, files from the current directory)
    python -m minihttpd

    # Serve and store files under /tmp/data
    python -m minihttpd --directory /tmp/data

    # Listen on all interfaces with more workers
    python -m minihttpd --host 0.0.0.0 --workers 16

    # JSON access logs
    python -m minihttpd --log-format json

Settings not given on the command line fall back to the HTTP_* environment
variables (see ServerConfig.from_env), then to the built-in defaults.

=============================================================================
"""

import argparse
import dataclasses
import sys
from typing import Optional, Sequence

from . import __version__
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig
from .server import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttpd",
        description="Minimal multi-threaded HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minihttpd                            # Run with defaults
  python -m minihttpd --directory /tmp/data      # Base directory for /files
  python -m minihttpd --port 8080 --workers 8    # Custom port and pool size
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # SERVER ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Base directory for /files/<name> (default: current directory)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of worker threads (default: 5)"
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """
    Build the configuration: environment first, CLI flags on top.

    Raises:
        ValueError: If the environment holds a non-numeric number.
    """
    overrides = {
        name: value
        for name, value in (
            ("host", args.host),
            ("port", args.port),
            ("directory", args.directory),
            ("workers", args.workers),
            ("log_level", args.log_level),
            ("log_format", args.log_format),
        )
        if value is not None
    }
    return dataclasses.replace(ServerConfig.from_env(), **overrides)


def main(argv: Optional[Sequence[str]] = None):
    """
    Parse arguments, build the server and run it until interrupted.

    Invalid settings (including a --directory that does not exist) exit
    with status 2 before anything is bound.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    server = create_app(config)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
