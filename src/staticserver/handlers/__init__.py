"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    StaticFileHandler   resolve a request path and read the file
    PathResolver        request path → absolute filesystem path

=============================================================================
"""

from .static import StaticFileHandler, PathResolver

__all__ = [
    "StaticFileHandler",
    "PathResolver",
]
