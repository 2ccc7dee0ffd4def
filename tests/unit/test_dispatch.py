"""
Unit tests for request dispatch and the connection hand-off.
"""

import socket
import threading
from unittest import mock

from staticserver import StaticServer
from staticserver.core import Connection, ConnectionState, SocketServer
from staticserver.http import HTTPRequest
from staticserver.http.status_codes import HTTPStatus


def make_request(method: str, path: str = "/foo.html") -> HTTPRequest:
    return HTTPRequest(method=method, path=path, version="HTTP/1.1")


class TestDispatch:
    """Tests for choosing a response by method."""

    def test_get_and_head_serve_same_response(self, config):
        server = StaticServer(config)

        get_response = server._dispatch(make_request("GET"))
        head_response = server._dispatch(make_request("HEAD"))

        assert get_response.status == HTTPStatus.OK
        assert head_response == get_response

    def test_other_methods_not_implemented(self, config):
        server = StaticServer(config)

        for method in ("POST", "PUT", "get", "Head"):
            assert server._dispatch(make_request(method)).status == HTTPStatus.NOT_IMPLEMENTED

    def test_missing_file(self, config):
        server = StaticServer(config)
        assert server._dispatch(make_request("GET", "/nope")).status == HTTPStatus.NOT_FOUND


class TestConnectionHandOff:
    """Tests for starting a worker per connection."""

    def test_worker_start_failure_releases_socket(self, config, monkeypatch):
        def refuse(self):
            raise RuntimeError("can't start new thread")

        monkeypatch.setattr(threading.Thread, "start", refuse)

        fake_socket = mock.Mock(spec=socket.socket)
        fake_socket.recv.side_effect = AssertionError("accept thread must not read")
        conn = Connection(socket=fake_socket, address=("127.0.0.1", 50000))

        StaticServer(config)._handle_connection(conn)

        assert conn.state == ConnectionState.CLOSED
        fake_socket.recv.assert_not_called()
        fake_socket.close.assert_called_once()


class TestShutdownBeforeStart:
    """A shutdown requested before the accept loop starts is honored."""

    def test_socket_server_returns(self, config):
        server = SocketServer(config)
        handler = mock.Mock()

        server.shutdown()
        server.start(handler)

        handler.assert_not_called()

    def test_static_server_run_returns(self, config):
        server = StaticServer(config)
        server.shutdown()

        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert not server.is_running
