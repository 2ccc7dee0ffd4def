"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Dict, Generator, Tuple

import pytest

from staticserver import StaticServer, ServerConfig


INDEX_HTML = "<html><body><h1>Home</h1></body></html>"
FOO_HTML = "<html><body>foo</body></html>"


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a query string."""
    return (
        b"GET /docs/page.html?lang=en&theme=dark HTTP/1.1\r\n"
        b"Host: localhost:9999\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """
    A document root with a few files, plus a file next to it that must
    not be reachable through the server.

        tmp_path/
            secret.txt
            www/
                index.html
                foo.html
                unicode.html
                sub/page.html
    """
    (tmp_path / "secret.txt").write_text("top secret")

    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_text(INDEX_HTML)
    (root / "foo.html").write_text(FOO_HTML)
    (root / "unicode.html").write_bytes("<p>héllo wörld</p>".encode("utf-8"))
    (root / "sub").mkdir()
    (root / "sub" / "page.html").write_text("<p>sub page</p>")
    return root


@pytest.fixture
def config(docroot: Path) -> ServerConfig:
    """Test server configuration on an OS-assigned port."""
    return ServerConfig(
        root=str(docroot),
        host="127.0.0.1",
        port=0,
        timeout=5.0,
        log_level="WARNING",
    )


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # not a test class, despite the name

    def __init__(self, server: StaticServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_listening(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes on a fresh connection and read until EOF."""
        with socket.create_connection(self.address, timeout=timeout) as sock:
            sock.sendall(raw)
            return read_until_eof(sock)

    def exchange(self, raw: bytes) -> Tuple[str, Dict[str, str], bytes]:
        """Send a request and return (status line, headers, body)."""
        return split_response(self.request(raw))


def read_until_eof(sock: socket.socket) -> bytes:
    """Read from a socket until the peer closes it."""
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(raw: bytes) -> Tuple[str, Dict[str, str], bytes]:
    """
    Split a raw response into (status line, headers, body).
    """
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server serving the docroot fixture."""
    test_srv = TestServer(StaticServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
