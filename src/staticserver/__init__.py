"""
=============================================================================
STATICSERVER - Minimal HTTP/1.1 Static File Server
=============================================================================

Serves the files under one directory over plain HTTP, using nothing but
raw sockets and threads.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   1. SOCKETS                                                         │
    │      - Bind, listen, accept loop                                    │
    │      - Drain request bytes in 4 KB chunks                            │
    │                                                                      │
    │   2. HTTP/1.1                                                        │
    │      - Request line, query string and header parsing                │
    │      - 200 / 404 / 501 responses with exact Content-Length          │
    │      - HEAD sends the head only                                      │
    │                                                                      │
    │   3. CONCURRENCY                                                     │
    │      - One thread per connection                                    │
    │      - One request per connection, then close                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from staticserver import StaticServer, ServerConfig

    server = StaticServer(ServerConfig(root="./public", port=9999))
    server.run()

Or from the command line:

    python -m staticserver --root ./public --port 9999

=============================================================================
"""

__version__ = "1.0.0"

from .server import StaticServer
from .config import ServerConfig

__all__ = ["StaticServer", "ServerConfig", "__version__"]
