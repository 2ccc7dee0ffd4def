"""
=============================================================================
CORE NETWORKING
=============================================================================

Socket-level building blocks, independent of HTTP:

    SocketServer    bind / listen / accept loop
    Connection      one client socket: read request bytes, write, close

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Wrapper for a client socket
    "ConnectionState",  # Connection lifecycle states
]
