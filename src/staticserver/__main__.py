"""
=============================================================================
STATICSERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on 127.0.0.1:9999
    python -m staticserver

    # Serve ./public on all interfaces, port 8080
    python -m staticserver --root ./public --host 0.0.0.0 --port 8080

    # Give up on clients that send nothing for 10 seconds
    python -m staticserver --timeout 10

Environment variables (HTTP_ROOT, HTTP_HOST, HTTP_PORT, HTTP_TIMEOUT,
HTTP_LOG_LEVEL) supply defaults; flags override them.

=============================================================================
"""

import argparse
import dataclasses
import sys
from typing import List, Optional

from . import __version__
from .server import StaticServer
from .config import ServerConfig, LOG_LEVELS, LOG_FORMATS


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, using `defaults` for unset flags."""
    parser = argparse.ArgumentParser(
        prog="staticserver",
        description="Minimal HTTP/1.1 server for a directory of files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m staticserver                           # Serve . on 127.0.0.1:9999
  python -m staticserver --root ./public           # Serve ./public
  python -m staticserver --host 0.0.0.0 -p 8080    # All interfaces, port 8080
        """
    )

    parser.add_argument(
        "--root", "-r",
        default=defaults.root,
        help=f"Directory to serve (default: {defaults.root})"
    )

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout,
        help="Per-connection socket timeout in seconds (default: wait forever)"
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--allow-outside-root",
        action="store_true",
        help="Do not reject paths that resolve outside the root (e.g. via '..')"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"staticserver {__version__}"
    )

    return parser


def config_from_args(argv: Optional[List[str]] = None) -> ServerConfig:
    """Combine environment defaults and command-line flags into a config."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return dataclasses.replace(
        defaults,
        root=args.root,
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        log_level=args.log_level,
        log_format=args.log_format,
        confine_to_root=not args.allow_outside_root,
    )


def main(argv: Optional[List[str]] = None):
    """
    Main CLI entry point.

    Exits with status 1 if the configuration (environment or flags) is
    invalid or the address cannot be bound.
    """
    try:
        config = config_from_args(argv)
        server = StaticServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
