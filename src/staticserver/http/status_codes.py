"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The static file server only ever answers with three status codes:

    ┌────────┬──────────────────────┬──────────────────────────────────────┐
    │  Code  │  Reason phrase       │  When                                │
    ├────────┼──────────────────────┼──────────────────────────────────────┤
    │  200   │  OK                  │  GET/HEAD for a readable file        │
    │  404   │  Not Found           │  missing, unreadable or bad path     │
    │  501   │  Not Implemented     │  any method other than GET/HEAD      │
    └────────┴──────────────────────┴──────────────────────────────────────┘

The reason phrase is the text that appears after the code in the
status line:

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── Reason phrase
              └────────── Status code

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes produced by the server.

    IntEnum lets a status be compared and formatted like a plain int:

        HTTPStatus.OK == 200        # True
        f"{HTTPStatus.NOT_FOUND}"   # "404"
    """

    OK = 200                  # File found and read
    NOT_FOUND = 404           # Resolution or open failed
    NOT_IMPLEMENTED = 501     # Method is neither GET nor HEAD

    def __str__(self) -> str:
        return str(self.value)

    @property
    def phrase(self) -> str:
        """Get the reason phrase for this status code."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
