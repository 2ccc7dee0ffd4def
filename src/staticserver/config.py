"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Everything the server needs to know before it starts: where the files
live, where to listen, and how to log.

=============================================================================
ONE IMMUTABLE VALUE, SHARED BY EVERY THREAD
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   main thread                                                        │
    │     config = ServerConfig(root="./public", port=9999)               │
    │     config.validate()                                                │
    │        │                                                             │
    │        ├──────────────┬──────────────┬──────────────┐               │
    │        ▼              ▼              ▼              ▼               │
    │    accept loop     worker 1      worker 2   ...  worker N            │
    │                                                                      │
    │   Every thread holds the SAME object. It is a frozen dataclass,     │
    │   so nobody can change it after startup and no lock is needed.       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    Priority (highest to lowest):

    1. Command-line arguments     python -m staticserver --port 3000
    2. Environment variables      HTTP_PORT=3000 python -m staticserver
    3. Defaults (this dataclass)

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
    Configuration for the static file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    FILES
    - root, index_file, confine_to_root

    NETWORK
    - host, port, backlog, chunk_size, timeout

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    root: str = "."
    """Directory files are served from. Never written to."""

    index_file: str = "index.html"
    """Document served for a request to "/"."""

    confine_to_root: bool = True
    """
    Treat paths that resolve outside root (via ".." or an absolute
    segment) as not found. False relies only on whether the file opens.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only
    - "0.0.0.0" - All network interfaces
    """

    port: int = 9999
    """Port to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of connections queued before accept()."""

    chunk_size: int = 4096
    """Bytes requested per recv() call when draining a request."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block forever (a client that never sends ties up its thread).
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (one line per request) or 'json'."""

    @property
    def root_path(self) -> Path:
        """The document root as an absolute path."""
        return Path(self.root).resolve()

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_ROOT       Document root (default: .)
        HTTP_HOST       Server host (default: 127.0.0.1)
        HTTP_PORT       Server port (default: 9999)
        HTTP_TIMEOUT    Socket timeout in seconds (default: none)
        HTTP_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            root=os.getenv("HTTP_ROOT", "."),
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "9999")),
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a typo fails immediately instead of
        turning every request into a 404.

        Raises:
            ValueError: If any value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.root_path.is_dir():
            raise ValueError(f"Document root is not a directory: {self.root}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
