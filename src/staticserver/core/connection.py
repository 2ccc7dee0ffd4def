"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: drain the request bytes, write one
response, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request sent in one write may
arrive in several recv() calls, and nothing in the stream says "this is
the end of the request" except what HTTP itself puts there.

=============================================================================
HOW WE FRAME A REQUEST: READ UNTIL A SHORT READ
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │                    read_request() Flow                           │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   while True:                                                    │
    │       chunk = recv(4096)                                         │
    │       │                                                          │
    │       ├── error / timeout ────────────────────► stop             │
    │       ├── b"" (peer closed) ──────────────────► stop             │
    │       ├── len(chunk) < 4096 ──────────────────► stop             │
    │       │   ("that was everything for now")                        │
    │       ├── buffer holds \r\n\r\n ──────────────► stop             │
    │       │   (full chunk that already ends the headers)             │
    │       └── otherwise: full chunk, keep reading                    │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

KNOWN LIMITATION:
─────────────────
This is a heuristic, not length-delimited framing. It assumes a small
request arrives in one burst. A request whose first segment is shorter
than a chunk but is not complete (slow client, fragmented send) is cut
short and will usually fail to parse. A request that fills whole chunks
without ever containing \r\n\r\n keeps reading until the peer sends a
short read or closes. Request bodies are never read on purpose.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │                                       ▲
              └──── unparsable request ───────────────┘

    One request, at most one response, never reused (no keep-alive).

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple


logger = logging.getLogger(__name__)


HEADER_TERMINATOR = b"\r\n\r\n"


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Tracked for logging and so close() is idempotent.
    """
    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Draining request bytes
    PROCESSING = "processing"  # Request parsed, building response
    WRITING = "writing"        # Sending response bytes
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used in log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        chunk_size: Bytes requested per recv() call.
        timeout: Socket timeout in seconds, None to block.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    chunk_size: int = 4096
    timeout: Optional[float] = None

    def __post_init__(self):
        # settimeout(None) puts the socket in plain blocking mode
        self.socket.settimeout(self.timeout)

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Drain the bytes the client has sent so far.

        Reads chunk_size bytes at a time and stops on a short read, on
        end-of-stream, on a read error, or on a full chunk once the header
        terminator has been seen.

        Returns:
            Everything read, possibly empty. Never raises: a failed read
            just ends the buffer, and the parser decides whether what we
            have is a request.
        """
        self.state = ConnectionState.READING
        buffer = bytearray()

        while True:
            try:
                chunk = self.socket.recv(self.chunk_size)
            except OSError as e:
                # socket.timeout and connection resets are both OSError
                logger.debug(f"[{self.id}] Read stopped: {e}")
                break

            buffer += chunk

            if len(chunk) < self.chunk_size:
                break

            if HEADER_TERMINATOR in buffer:
                break

        return bytes(buffer)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Uses sendall() so a partial write is never mistaken for success.

        Returns:
            True if send succeeded, False if the connection failed.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            # Peer went away; nothing to retry
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. Drain whatever the client still sends, briefly
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def abort(self):
        """
        Release the socket immediately, skipping shutdown and drain.

        Used on the accept thread, which must never wait on a client.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection aborted")

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                data = conn.read_request()
                response.send(conn)
            # closed here, even if an exception escaped
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
