"""
Unit tests for HTTP response building.
"""

import pytest

from staticserver.http.response import (
    HTTPResponse,
    ResponseBuilder,
    NOT_FOUND_BODY,
    NOT_IMPLEMENTED_BODY,
    success,
    not_found,
    not_implemented,
)
from staticserver.http.status_codes import HTTPStatus


class FakeConnection:
    """Records what would have been written to the socket."""

    def __init__(self, ok: bool = True):
        self.sent = []
        self.ok = ok

    def send_response(self, data: bytes) -> bool:
        self.sent.append(data)
        return self.ok


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        response = HTTPResponse(status=HTTPStatus.OK)
        assert response.status_line == "HTTP/1.1 200 OK"

    def test_head_bytes_exact(self):
        response = success("hello")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/html\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )

    def test_head_without_body(self):
        response = success("hello")

        assert response.to_bytes(include_body=False) == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/html\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
        )

    def test_head_property_has_no_blank_line(self):
        head = success("x").head

        assert head.endswith("Content-Length: 1\r\n")
        assert not head.endswith("\r\n\r\n")

    def test_content_length_counts_bytes(self):
        response = success("héllo")

        assert response.body == "héllo".encode("utf-8")
        assert response.content_length == 6
        assert "Content-Length: 6\r\n" in response.head

    def test_binary_body_kept_verbatim(self):
        payload = bytes(range(256))
        response = success(payload)

        assert response.body == payload
        assert response.to_bytes().endswith(payload)
        assert response.content_length == 256

    def test_empty_body(self):
        response = success(b"")

        assert response.content_length == 0
        assert response.to_bytes().endswith(b"Content-Length: 0\r\n\r\n")


class TestFixedResponses:
    """The two fixed error pages."""

    def test_not_found(self):
        response = not_found()

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.status_line == "HTTP/1.1 404 Not Found"
        assert response.body == NOT_FOUND_BODY.encode()
        assert response.body == (
            b"<html><head><title>404 Not Found</title></head>"
            b"<body>404 Not Found</body></html>"
        )
        assert response.content_length == len(NOT_FOUND_BODY)

    def test_not_implemented(self):
        response = not_implemented()

        assert response.status == HTTPStatus.NOT_IMPLEMENTED
        assert response.status_line == "HTTP/1.1 501 Not Implemented"
        assert response.body == NOT_IMPLEMENTED_BODY.encode()
        assert f"Content-Length: {len(NOT_IMPLEMENTED_BODY)}\r\n" in response.head

    @pytest.mark.parametrize("factory", [not_found, not_implemented])
    def test_error_pages_are_html(self, factory):
        assert "Content-Type: text/html\r\n" in factory().head


class TestSend:
    """Tests for writing responses to a connection."""

    def test_send_writes_full_response(self):
        conn = FakeConnection()
        response = success("<p>hi</p>")

        assert response.send(conn) is True
        assert conn.sent == [response.to_bytes()]

    def test_send_head_only(self):
        conn = FakeConnection()
        response = success("<p>hi</p>")

        assert response.send_head_only(conn) is True
        assert conn.sent == [response.to_bytes(include_body=False)]
        assert conn.sent[0].endswith(b"Content-Length: 9\r\n\r\n")

    def test_send_reports_failure(self):
        conn = FakeConnection(ok=False)
        assert not_found().send(conn) is False


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_builder_defaults(self):
        response = ResponseBuilder().build()

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/html"
        assert response.body == b""

    def test_builder_chain(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .body("gone")
            .build())

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"gone"

    def test_bytes_body_kept_as_is(self):
        response = ResponseBuilder().html(b"\xff\x00").build()
        assert response.body == b"\xff\x00"


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.NOT_IMPLEMENTED.phrase == "Not Implemented"

    def test_str_is_code(self):
        assert str(HTTPStatus.NOT_FOUND) == "404"
