"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes drained from a connection into an HTTPRequest.

=============================================================================
WHAT WE PARSE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  REQUEST LINE                                                        │
    │    GET /docs/page.html?lang=en&theme=dark HTTP/1.1\r\n              │
    │    ─┬─ ──────────────────┬──────────────── ───┬────                 │
    │     │                    │                    │                      │
    │   Method           Request target          Version                   │
    │                          │                                           │
    │             ┌────────────┴────────────┐                             │
    │             │                         │                              │
    │           Path                  Query string                         │
    │      /docs/page.html         lang=en&theme=dark                      │
    │                                                                      │
    │  HEADERS (one "Name: Value" per line)                                │
    │    Host: localhost:9999\r\n                                          │
    │    User-Agent: curl/8.5.0\r\n                                        │
    │    \r\n                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

The parser is deliberately literal. It does exactly this and no more:

    1. Decode the bytes as strict UTF-8.
    2. Split on CRLF.
    3. Split the first line on single spaces. Exactly three tokens, or fail.
       The target must start with "/".
    4. Split the target on the first "?". The query is a dict of raw,
       un-escaped "key=value" pairs. Pairs without "=" are dropped, later
       duplicates win, and an empty result means "no query" (None).
    5. Every other line is split on the first ": ". Lines without it are
       skipped. Later duplicate header names win.

There is no body handling: the blank line that ends the headers is just
another line without ": ", and anything after it is treated the same way
as the header lines before it.

    "GET  /index.html HTTP/1.1"    ← two spaces = four tokens = failure
    "GET /a b HTTP/1.1"            ← space in target = four tokens = failure
    ""                             ← one empty token = failure

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


class HTTPParseError(Exception):
    """
    Raised when the bytes read from a connection are not a request we
    can interpret.

    The server never answers a request it could not parse. It closes the
    connection, so unlike a general-purpose server there is no status
    code attached to this error.
    """


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Built once per connection and never mutated (frozen dataclass).

    Attributes:
        method:         Method token exactly as received ("GET", "HEAD",
                        "DELETE", ...). Case-sensitive.
        path:           Request target without the query string. Always
                        starts with "/".
        version:        Version token from the request line ("HTTP/1.1").
                        Not validated.
        headers:        Header name → value. Names keep the case they were
                        sent with. Last occurrence of a duplicate wins.
        query:          Query parameter → value, or None when there is no
                        query string or no usable "key=value" pair.
        client_address: (ip, port) of the peer, for logging.
    """

    method: str
    path: str
    version: str
    headers: Dict[str, str] = field(default_factory=dict)
    query: Optional[Dict[str, str]] = None
    client_address: Tuple[str, int] = ("", 0)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Look up a header case-insensitively.

        The headers dict keeps names as sent, so headers["host"] misses a
        "Host" header. Use this when the spelling is unknown.
        """
        wanted = name.lower()
        value = default
        for key, header_value in self.headers.items():
            if key.lower() == wanted:
                value = header_value
        return value

    @property
    def user_agent(self) -> str:
        """Get the User-Agent header value."""
        return self.get_header("User-Agent")


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER PIPELINE
    ==========================================================================

        Raw bytes
            │
            ▼
        decode UTF-8 ──────────── invalid? → HTTPParseError
            │
            ▼
        split on CRLF
            │
            ├── line 0 ──► _parse_request_line ── not 3 tokens? → HTTPParseError
            │                    │
            │                    └──► _parse_target ──► (path, query)
            │
            └── lines 1.. ──► _parse_headers ──► {name: value}
            │
            ▼
        HTTPRequest

    The parser holds no state, so one instance can be shared by every
    worker thread.
    ==========================================================================
    """

    LINE_SEPARATOR = "\r\n"
    HEADER_SEPARATOR = ": "

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw bytes drained from the connection.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the bytes are not UTF-8 or the request line
                            is malformed.
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise HTTPParseError(f"Request is not valid UTF-8: {e}") from e

        lines = text.split(self.LINE_SEPARATOR)
        method, target, version = self._parse_request_line(lines[0])
        path, query = self._parse_target(target)
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query=query,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str, str]:
        """
        Split "METHOD SP TARGET SP VERSION" into its three tokens.

        Splitting is on single spaces, so doubled spaces or a space inside
        the target give more than three tokens and the line is rejected
        rather than partially matched.
        """
        tokens = line.split(" ")
        if len(tokens) != 3:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = tokens
        if not target.startswith("/"):
            raise HTTPParseError(f"Request target must start with '/': {target!r}")
        return method, target, version

    def _parse_target(self, target: str) -> Tuple[str, Optional[Dict[str, str]]]:
        """
        Separate the path from the query string.

            "/search"            → ("/search", None)
            "/search?"           → ("/search", None)
            "/search?  "         → ("/search", None)
            "/search?q=x&page=2" → ("/search", {"q": "x", "page": "2"})
        """
        path, sep, query_string = target.partition("?")
        if not sep or not query_string.strip():
            return path, None
        return path, parse_query(query_string)

    def _parse_headers(self, lines: list) -> Dict[str, str]:
        """
        Parse "Name: Value" lines into a dictionary.

        A line without ": " (including the blank line that ends the
        header block) is skipped. Assignment order gives last-wins
        semantics for repeated names.
        """
        headers: Dict[str, str] = {}
        for line in lines:
            name, sep, value = line.partition(self.HEADER_SEPARATOR)
            if not sep:
                continue
            headers[name] = value
        return headers


def parse_query(query_string: str) -> Optional[Dict[str, str]]:
    """
    Parse "a=1&b=2" into {"a": "1", "b": "2"}.

    Values are kept exactly as transmitted (no percent-decoding). Each pair
    is split on its first "=", so "a=b=c" gives {"a": "b=c"}. A pair with
    no "=" is dropped. Returns None rather than an empty dict when nothing
    usable remains.
    """
    query: Dict[str, str] = {}
    for pair in query_string.split("&"):
        key, sep, value = pair.partition("=")
        if not sep:
            continue
        query[key] = value
    return query or None


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
) -> Optional[HTTPRequest]:
    """
    Parse a request, returning None instead of raising on bad input.

    Convenience wrapper for callers that only care whether the bytes
    form a request at all.
    """
    try:
        return RequestParser().parse(data, client_address)
    except HTTPParseError:
        return None
