"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds the three responses the server knows how to send and writes them
to a connection.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ HEAD ─────────────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                 ← status line            │ │
    │  │    Content-Type: text/html\r\n                                  │ │
    │  │    Content-Length: 42\r\n              ← len(body)              │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │    \r\n                                   ← blank line (separator)   │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    <html>...</html>                    ← omitted for HEAD       │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The header block is fixed: no Date, Server, Connection or caching
headers. Every connection is closed after one response, so the client
frames the body with Content-Length (or by end-of-stream).

=============================================================================
CONTENT-LENGTH
=============================================================================

Content-Length counts BYTES, and the body is stored as bytes, so the
header always matches what is actually written to the socket:

    "hello"        → 5 characters → 5 bytes  → Content-Length: 5
    "héllo"        → 5 characters → 6 bytes  → Content-Length: 6

=============================================================================
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from .status_codes import HTTPStatus

if TYPE_CHECKING:
    from ..core.connection import Connection


HTML_CONTENT_TYPE = "text/html"

NOT_FOUND_BODY = (
    "<html><head><title>404 Not Found</title></head>"
    "<body>404 Not Found</body></html>"
)

NOT_IMPLEMENTED_BODY = (
    "<html><head><title>501 Not Implemented</title></head>"
    "<body>501 Not Implemented</body></html>"
)


@dataclass(frozen=True)
class HTTPResponse:
    """
    One outgoing reply.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        handler builds            send() / send_head_only()      socket
        HTTPResponse    ─────►    serializes head (+ body) ─────► sendall()
                                                                    │
                                                            then discarded

    The head is derived from status, content type and body, so the
    Content-Length it carries can never disagree with the body.
    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = HTML_CONTENT_TYPE
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {self.status} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    @property
    def head(self) -> str:
        """
        Status line plus header block, each line CRLF-terminated.

        Does not include the blank line that separates head from body.
        """
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {self.content_length}",
        ]
        return "".join(f"{line}\r\n" for line in lines)

    def to_bytes(self, include_body: bool = True) -> bytes:
        """
        Serialize the response for the wire.

            include_body=True   head + CRLF + body   (GET, 404, 501)
            include_body=False  head + CRLF          (HEAD)

        Args:
            include_body: Whether to append the body after the blank line.

        Returns:
            Bytes ready for socket.sendall().
        """
        head_bytes = (self.head + "\r\n").encode("utf-8")
        if not include_body:
            return head_bytes
        return head_bytes + self.body

    def send(self, conn: "Connection") -> bool:
        """
        Write head, blank line and body to the connection.

        Returns:
            True if the bytes were handed to the OS, False if the write
            failed (already logged by the connection).
        """
        return conn.send_response(self.to_bytes())

    def send_head_only(self, conn: "Connection") -> bool:
        """
        Write head and blank line only.

        Used for HEAD requests: the body was still built, so
        Content-Length matches what a GET would have sent.
        """
        return conn.send_response(self.to_bytes(include_body=False))


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .html(NOT_FOUND_BODY)
            .build())

    Each method returns self except build().
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._content_type = HTML_CONTENT_TYPE
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body.

        Strings are encoded to UTF-8; bytes (file contents) are kept as-is.
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def html(self, html: Union[str, bytes]) -> "ResponseBuilder":
        """Set an HTML body and the text/html content type."""
        self._content_type = HTML_CONTENT_TYPE
        return self.body(html)

    def build(self) -> HTTPResponse:
        """Build the final, immutable HTTPResponse."""
        return HTTPResponse(
            status=self._status,
            content_type=self._content_type,
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def success(body: Union[str, bytes]) -> HTTPResponse:
    """Create a 200 OK text/html response around a file's contents."""
    return ResponseBuilder().status(HTTPStatus.OK).html(body).build()


def not_found() -> HTTPResponse:
    """Create the fixed 404 Not Found page."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).html(NOT_FOUND_BODY).build()


def not_implemented() -> HTTPResponse:
    """Create the fixed 501 Not Implemented page."""
    return (ResponseBuilder()
        .status(HTTPStatus.NOT_IMPLEMENTED)
        .html(NOT_IMPLEMENTED_BODY)
        .build())
