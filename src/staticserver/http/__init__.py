"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Pure protocol code: no sockets, no filesystem.

    raw bytes ──► RequestParser ──► HTTPRequest
                                         │
                                   (handler decides)
                                         │
    wire bytes ◄── HTTPResponse.to_bytes ◄── success / not_found / not_implemented

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request, parse_query
from .response import (
    HTTPResponse,
    ResponseBuilder,
    success,          # 200 OK
    not_found,        # 404 Not Found
    not_implemented,  # 501 Not Implemented
)
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    "parse_query",
    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "success",
    "not_found",
    "not_implemented",
    # Status codes
    "HTTPStatus",
]
