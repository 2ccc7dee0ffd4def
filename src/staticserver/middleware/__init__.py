"""
=============================================================================
MIDDLEWARE
=============================================================================

Cross-cutting behavior wrapped around request dispatch.

    Middleware          abstract base: __call__(request, next)
    MiddlewarePipeline  composes middleware around a handler
    LoggingMiddleware   one access log line per parsed request

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
