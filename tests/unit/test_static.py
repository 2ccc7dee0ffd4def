"""
Unit tests for path resolution and static file serving.
"""

import os
from pathlib import Path

import pytest

from staticserver.handlers.static import PathResolver, StaticFileHandler
from staticserver.http.response import NOT_FOUND_BODY
from staticserver.http.status_codes import HTTPStatus


class TestPathResolver:
    """Tests for PathResolver class."""

    def test_root_maps_to_index(self, docroot: Path):
        resolver = PathResolver(docroot)

        assert resolver.relative_part("/") == "index.html"
        assert resolver.resolve("/") == docroot.resolve() / "index.html"

    def test_custom_index_file(self, docroot: Path):
        resolver = PathResolver(docroot, index_file="foo.html")
        assert resolver.resolve("/") == docroot.resolve() / "foo.html"

    def test_leading_slash_stripped(self, docroot: Path):
        resolver = PathResolver(docroot)

        assert resolver.relative_part("/sub/page.html") == "sub/page.html"
        assert resolver.resolve("/sub/page.html") == docroot.resolve() / "sub" / "page.html"

    def test_only_first_slash_stripped(self, docroot: Path):
        assert PathResolver(docroot).relative_part("//x") == "/x"

    def test_relative_root_is_made_absolute(self, docroot: Path, monkeypatch):
        monkeypatch.chdir(docroot.parent)
        resolver = PathResolver("www")

        assert resolver.root_dir == docroot.resolve()
        assert resolver.resolve("/foo.html").is_absolute()

    @pytest.mark.parametrize("path", [
        "/../secret.txt",
        "/sub/../../secret.txt",
        "//etc/passwd",
    ])
    def test_outside_root_rejected(self, docroot: Path, path: str):
        assert PathResolver(docroot).resolve(path) is None

    def test_dotdot_inside_root_allowed(self, docroot: Path):
        resolved = PathResolver(docroot).resolve("/sub/../foo.html")

        assert resolved is not None
        assert resolved.resolve() == docroot.resolve() / "foo.html"

    def test_symlink_outside_root_rejected(self, docroot: Path):
        os.symlink(docroot.parent / "secret.txt", docroot / "leak.html")
        assert PathResolver(docroot).resolve("/leak.html") is None

    def test_unconfined_allows_outside(self, docroot: Path):
        resolver = PathResolver(docroot, confine_to_root=False)
        resolved = resolver.resolve("/../secret.txt")

        assert resolved is not None
        assert resolved.resolve() == docroot.parent.resolve() / "secret.txt"

    def test_nul_byte_rejected(self, docroot: Path):
        assert PathResolver(docroot).resolve("/foo\x00.html") is None
        assert PathResolver(docroot, confine_to_root=False).resolve("/a\x00") is None


class TestStaticFileHandler:
    """Tests for StaticFileHandler class."""

    def test_serve_file(self, docroot: Path):
        response = StaticFileHandler(docroot).serve("/foo.html")

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/html"
        assert response.body == (docroot / "foo.html").read_bytes()
        assert response.content_length == len(response.body)

    def test_serve_index(self, docroot: Path):
        response = StaticFileHandler(docroot).serve("/")
        assert response.body == (docroot / "index.html").read_bytes()

    def test_serve_nested(self, docroot: Path):
        response = StaticFileHandler(docroot).serve("/sub/page.html")
        assert response.body == b"<p>sub page</p>"

    def test_file_bytes_served_verbatim(self, docroot: Path):
        response = StaticFileHandler(docroot).serve("/unicode.html")

        assert response.body == "<p>héllo wörld</p>".encode("utf-8")
        assert response.content_length == len(response.body)

    def test_non_utf8_file_served(self, docroot: Path):
        (docroot / "latin1.html").write_bytes(b"caf\xe9")
        response = StaticFileHandler(docroot).serve("/latin1.html")

        assert response.status == HTTPStatus.OK
        assert response.body == b"caf\xe9"

    @pytest.mark.parametrize("path", [
        "/missing.html",
        "/sub",
        "/sub/",
        "/../secret.txt",
        "/foo.html/extra",
    ])
    def test_not_found(self, docroot: Path, path: str):
        response = StaticFileHandler(docroot).serve(path)

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == NOT_FOUND_BODY.encode()

    def test_missing_index(self, tmp_path: Path):
        response = StaticFileHandler(tmp_path).serve("/")
        assert response.status == HTTPStatus.NOT_FOUND

    def test_unconfined_serves_outside(self, docroot: Path):
        static = StaticFileHandler(docroot, confine_to_root=False)
        response = static.serve("/../secret.txt")

        assert response.status == HTTPStatus.OK
        assert response.body == b"top secret"

    def test_file_changes_are_picked_up(self, docroot: Path):
        static = StaticFileHandler(docroot)
        assert static.serve("/foo.html").body == (docroot / "foo.html").read_bytes()

        (docroot / "foo.html").write_text("changed")
        assert static.serve("/foo.html").body == b"changed"
