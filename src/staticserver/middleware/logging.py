"""
=============================================================================
ACCESS LOGGING MIDDLEWARE
=============================================================================

Emits one line for every request that parsed successfully. Requests we
could not parse are never logged here: they never reach a handler.

=============================================================================
LOG FORMATS
=============================================================================

TEXT (default):

    127.0.0.1 - - [2026-10-19 14:03:22] "GET /index.html" 200 1534 0.41ms
    127.0.0.1 - - [2026-10-19 14:03:25] "GET /search" 404 79 0.12ms query={'q': 'x'}

JSON (for log aggregators):

    {"method": "GET", "path": "/index.html", "query": null, "status_code": 200, ...}

=============================================================================
LOGGER
=============================================================================

Access lines go to the namespaced logger "staticserver.access", so they
can be routed separately from diagnostics:

    logging.getLogger("staticserver.access").addHandler(file_handler)

=============================================================================
"""

import time
import json
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("staticserver.access")


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class RequestLog:
    """
    Structured log entry for a request.

    Fields:
        method:         HTTP method as received
        path:           Request path (no query string)
        query:          Parsed query parameters, or None
        client_ip:      Client's IP address
        user_agent:     User-Agent header, "-" if absent
        status_code:    Status sent back
        content_length: Content-Length sent back
        duration_ms:    Time spent building the response
        timestamp:      Local time the request was handled
    """

    method: str
    path: str
    query: Optional[Dict[str, str]]
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        line = (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )
        if self.query:
            line += f" query={self.query}"
        return line


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Usage:
        pipeline.add(LoggingMiddleware())                   # text lines
        pipeline.add(LoggingMiddleware(log_format="json"))  # JSON lines
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level access lines are emitted at.
        """
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start_time = time.time()

        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        log_entry = RequestLog(
            method=request.method,
            path=request.path,
            query=request.query,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=response.content_length,
            duration_ms=duration_ms,
            timestamp=time.strftime(TIMESTAMP_FORMAT),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())

        return response
