"""
=============================================================================
STATIC FILE SERVER
=============================================================================

Ties the pieces together: accept loop, one thread per connection,
parse, dispatch, respond, close.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │  StaticServer   │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐     │
    │    │ SocketServer │    │RequestParser │    │StaticFileHandler │     │
    │    │ (accepting)  │    │ (bytes→req)  │    │ (path→response)  │     │
    │    └──────┬───────┘    └──────────────┘    └──────────────────┘     │
    │           │                                                          │
    │           ▼                                                          │
    │    ┌──────────────┐      one new thread per accepted connection      │
    │    │  Connection  │                                                  │
    │    └──────────────┘                                                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PER-CONNECTION LIFECYCLE (worker thread)
=============================================================================

    read_request()  ──► bytes
         │
    parse()  ── HTTPParseError ──────────────────────────────┐
         │                                                    │
    dispatch on method:                                       │
         GET   ──► serve(path) ──► send()                     │
         HEAD  ──► serve(path) ──► send_head_only()           │
         other ──► not_implemented() ──► send()               │
         │                                                    │
         ▼                                                    ▼
    close()  ◄───────────────────────────────────────── close(), no response

One request per connection. No keep-alive, no retries.

=============================================================================
CONCURRENCY
=============================================================================

Every accepted connection gets its own daemon thread. There is no pool
and no cap: under load, thread creation is the only throttle. Workers
share nothing mutable; the config is frozen and the parser and handler
are stateless, and the filesystem is re-read on every request.

A worker that crashes logs the traceback and closes its own socket.
The accept loop and the other workers never see the failure.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .handlers import StaticFileHandler
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, not_implemented,
)
from .middleware import MiddlewarePipeline, LoggingMiddleware


logger = logging.getLogger(__name__)


class StaticServer:
    """
    Minimal HTTP/1.1 server for a directory of files.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig(root="./public", port=9999)
        server = StaticServer(config)
        server.run()                      # blocks until Ctrl+C

    From another thread (tests):

        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_listening(5.0)
        host, port = server.address
        ...
        server.shutdown()
    =========================================================================
    """

    SUPPORTED_METHODS = ("GET", "HEAD")

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
        self._parser = RequestParser()
        self._static = StaticFileHandler(
            self.config.root,
            index_file=self.config.index_file,
            confine_to_root=self.config.confine_to_root,
        )

        self._middleware = MiddlewarePipeline()
        self._middleware.add(LoggingMiddleware(log_format=self.config.log_format))
        self._handler = self._middleware.wrap(self._dispatch)

        self._running = False

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the address cannot be bound. Logged before it
                     propagates; the accept loop never starts.
        """
        self._setup_logging()
        self._running = True

        logger.info(f"Serving {self.config.root_path} on {self.config.host}:{self.config.port}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._running = False
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight workers finish on their own."""
        self._socket_server.shutdown()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound. False on timeout."""
        return self._socket_server.wait_until_listening(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("staticserver").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a new connection to its own worker thread.

        Runs on the accept thread, so it only starts the thread. If the
        thread cannot be started (resource exhaustion) the socket is
        released without draining and the accept loop carries on.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as e:
            logger.error(f"[{conn.id}] Could not start worker thread: {e}")
            conn.abort()

    def _process_connection(self, conn: Connection):
        """
        Read, parse, respond and close one connection (worker thread).
        """
        with conn:
            try:
                raw_request = conn.read_request()

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.debug(f"[{conn.id}] Dropping unparsable request: {e}")
                    return

                conn.state = ConnectionState.PROCESSING
                response = self._handler(request)

                if request.method == "HEAD":
                    response.send_head_only(conn)
                else:
                    response.send(conn)

            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def _dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Choose the response for a parsed request.

        GET and HEAD build the same response; only what gets written
        differs, and that is decided by the caller.
        """
        if request.method not in self.SUPPORTED_METHODS:
            return not_implemented()
        return self._static.serve(request.path)
