"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Maps a request path onto the document root and reads the file.

=============================================================================
PATH RESOLUTION
=============================================================================

    root = /srv/www

    request path          relative part        filesystem path
    ────────────          ─────────────        ───────────────
    /                     index.html           /srv/www/index.html
    /about.html           about.html           /srv/www/about.html
    /docs/a.html          docs/a.html          /srv/www/docs/a.html
    /docs/                docs/                /srv/www/docs  (directory → 404)

Only "/" gets the index document. A request for a directory opens a
directory, which fails, which is a 404. There is no directory listing.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The relative part is JOINED onto the root, not concatenated, so the
platform join rules apply, including the dangerous ones:

    GET /../etc/passwd     → /srv/www/../etc/passwd → /srv/etc/passwd
    GET //etc/passwd       → join("/srv/www", "/etc/passwd") → /etc/passwd

With confine_to_root (the default) the joined path is resolved (".."
and symlinks followed) and anything that lands outside the root is
answered exactly like a missing file:

    full_path = (root / relative).resolve()
    full_path.relative_to(root)     # ValueError if outside → 404

With confine_to_root=False the server trusts the open() call alone.

=============================================================================
"""

import os
import logging
from pathlib import Path
from typing import Optional, Union

from ..http.response import HTTPResponse, success, not_found


logger = logging.getLogger(__name__)


class PathResolver:
    """
    Resolves request paths to absolute paths under a document root.

        resolver = PathResolver("/srv/www")
        resolver.resolve("/")            # Path("/srv/www/index.html")
        resolver.resolve("/../secret")   # None (outside root)
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        index_file: str = "index.html",
        confine_to_root: bool = True,
    ):
        """
        Args:
            root_dir: Document root. Made absolute here, once.
            index_file: Document substituted for the path "/".
            confine_to_root: Reject paths that resolve outside root_dir.
        """
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file
        self.confine_to_root = confine_to_root

    def relative_part(self, path: str) -> str:
        """
        Strip the leading "/" from a request path.

        Exactly "/" maps to the index document. Anything else keeps every
        character after the first one, so "//x" becomes "/x".
        """
        if path == "/":
            return self.index_file
        return path[1:]

    def resolve(self, path: str) -> Optional[Path]:
        """
        Map a request path onto the filesystem.

        Args:
            path: Request path, starting with "/".

        Returns:
            Absolute filesystem path, or None when the path cannot name a
            file under the root (invalid characters, or outside the root
            while confine_to_root is on). None is treated as "not found".
        """
        relative = self.relative_part(path)

        if "\x00" in relative:
            # No OS path can contain NUL
            return None

        full_path = Path(os.path.join(self.root_dir, relative))

        if not self.confine_to_root:
            return full_path

        try:
            resolved = full_path.resolve()
            resolved.relative_to(self.root_dir)
        except (OSError, ValueError, RuntimeError):
            logger.warning(f"Rejected path outside document root: {path!r}")
            return None

        return full_path


class StaticFileHandler:
    """
    Serves files from a document root.

    =========================================================================
    FLOW
    =========================================================================

        serve("/about.html")
            │
            ├──► PathResolver.resolve()   → None?         → 404
            │
            ├──► read file into memory    → OSError?      → 404
            │    (missing, directory, permission denied)
            │
            └──► 200 with the file's bytes as a text/html body

    Files are re-read on every request. Nothing is cached.
    =========================================================================
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        index_file: str = "index.html",
        confine_to_root: bool = True,
    ):
        self.resolver = PathResolver(
            root_dir,
            index_file=index_file,
            confine_to_root=confine_to_root,
        )

    def serve(self, path: str) -> HTTPResponse:
        """
        Build the response for a GET or HEAD of `path`.

        The caller decides whether the body is transmitted; the response
        always carries it so Content-Length is the same for both methods.
        """
        full_path = self.resolver.resolve(path)
        if full_path is None:
            return not_found()

        content = self._read_file(full_path)
        if content is None:
            return not_found()

        return success(content)

    def _read_file(self, path: Path) -> Optional[bytes]:
        """
        Read a whole file, or return None if it cannot be opened.

        IsADirectoryError, FileNotFoundError and PermissionError are all
        OSError; ValueError covers paths the OS rejects outright.
        """
        try:
            with open(path, "rb") as f:
                return f.read()
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot open {path}: {e}")
            return None
