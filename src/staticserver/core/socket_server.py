"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: bind, listen, accept, hand each client socket
to a callback. It knows nothing about HTTP.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. bind()      Reserve HOST:PORT            ← can fail: port in use,
                                                  permission denied
    3. listen()    OS starts queueing connections (backlog)
    4. accept()    BLOCKS until a client connects, returns a NEW socket
                   just for that client. The listening socket keeps
                   listening.
    5. close()     Release the listening socket

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    └───────────┬───────────┘     Never sends/receives data
                                │
        ┌───────────────────────┼───────────────────────┐
        ▼                       ▼                       ▼
    ┌───────────┐         ┌───────────┐         ┌───────────┐
    │ Client    │         │ Client    │         │ Client    │
    │ Socket 1  │         │ Socket 2  │         │ Socket 3  │
    └───────────┘         └───────────┘         └───────────┘

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() blocks. To notice shutdown() we give the listening socket a
one-second timeout and loop:

    while running:
        try:
            accept()          # at most 1 second
        except timeout:
            continue          # re-check running flag

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, chunk size,
                    per-connection timeout).

        The socket is created lazily in start().
        """
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._address: Optional[Tuple[str, int]] = None
        self._running = False
        self._listening_event = threading.Event()
        self._shutdown_event = threading.Event()
        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        Get the server's address (IP, port).

        Once bound this is the real address, so a config with port 0
        reports the port the OS picked.
        """
        if self._address is not None:
            return self._address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind immediately after a restart instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers that call shutdown().

        Python only allows this from the main thread. When the server runs
        in a background thread (tests, embedding) signals are left alone
        and the owner calls shutdown() itself.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown().

        Args:
            connection_handler: Called on the accept thread for every new
                                connection. It must return quickly; the
                                HTTP server hands the connection to a new
                                thread.

        Raises:
            OSError: If the address cannot be bound. The error is logged
                     first and the accept loop never starts.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._address = self._socket.getsockname()[:2]

        self._running = True
        if self._shutdown_event.is_set():
            # shutdown() already requested, possibly before start()
            self._running = False
        self._setup_signals()

        host, port = self._address
        logger.info(f"Server listening on {host}:{port}")
        self._listening_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Main loop for accepting connections.

        An accept error is logged and the loop keeps going: one bad
        accept (e.g. a client that reset before we got to it) must not
        take the whole server down. An error after shutdown() means the
        socket was closed under us, so we leave.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address[:2],
                chunk_size=self.config.chunk_size,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call from any thread, any number of times. The accept
        loop notices within ACCEPT_POLL_INTERVAL seconds. Called before
        start(), it makes start() return right after binding. A server
        that has been shut down is not started again.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        """Restore signal handlers and close the listening socket."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._listening_event.clear()
        self._shutdown_event.set()
        logger.info("Socket server stopped")

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is bound and listening.

        Returns:
            True once listening, False on timeout.
        """
        return self._listening_event.wait(timeout)
