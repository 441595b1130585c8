"""
Unit tests for HTTPServer request handling, without a listening socket.
"""

import gzip
import socket

import pytest

from tinyhttp import HTTPServer, ServerConfig, create_app
from tinyhttp.core import Connection


class TestHandleRequest:

    def test_root(self, app, make_request):
        response = app.handle_request(make_request(target="/"))

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_echo(self, app, make_request):
        response = app.handle_request(make_request(target="/echo/abc"))

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_echo_gzip(self, app, make_request):
        request = make_request(target="/echo/abc", headers={"Accept-Encoding": "gzip"})
        response = app.handle_request(request)

        assert list(response.headers) == ["Content-Encoding", "Content-Type", "Content-Length"]
        assert response.headers["Content-Length"] == len(response.body)
        assert gzip.decompress(response.body) == b"abc"

    def test_user_agent(self, app, make_request):
        request = make_request(target="/user-agent", headers={"User-Agent": "foobar/1.2.3"})

        assert app.handle_request(request).body == b"foobar/1.2.3"

    def test_unknown_path(self, app, make_request):
        response = app.handle_request(make_request(target="/abcdefg"))

        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_unknown_path_with_gzip(self, app, make_request):
        request = make_request(target="/abcdefg", headers={"Accept-Encoding": "gzip"})

        assert app.handle_request(request).to_bytes() == (
            b"HTTP/1.1 404 Not Found\r\nContent-Encoding: gzip\r\n\r\n"
        )

    def test_user_agent_needs_exact_target(self, app, make_request):
        request = make_request(target="xuser-agent", headers={"User-Agent": "foo"})

        assert app.handle_request(request).to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_asterisk_target_is_not_root(self, app, make_request):
        response = app.handle_request(make_request(target="*"))

        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_files_round_trip(self, app, make_request, files_dir):
        post = make_request("POST", "/files/new", body=b"payload")
        assert app.handle_request(post).to_bytes() == b"HTTP/1.1 201 Created\r\n\r\n"

        response = app.handle_request(make_request(target="/files/new"))
        assert response.body == b"payload"
        assert response.headers["Content-Type"] == "application/octet-stream"

    def test_files_without_directory(self, make_request):
        app = create_app(ServerConfig(port=0))

        get = app.handle_request(make_request(target="/files/foo"))
        post = app.handle_request(make_request("POST", "/files/foo", body=b"x"))

        assert get.status_code == 404
        assert post.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            create_app(ServerConfig(port=70000))

    def test_custom_route(self, make_request):
        server = HTTPServer(ServerConfig(port=0))

        @server.get("/ping")
        def ping(request, response):
            response.set_body("pong")

        assert server.handle_request(make_request(target="/ping")).body == b"pong"


@pytest.fixture
def conn_pair():
    """A Connection on one end of a socket pair, the raw peer on the other."""
    server_sock, client_sock = socket.socketpair()
    conn = Connection(socket=server_sock, address=("127.0.0.1", 40000))
    yield conn, client_sock
    client_sock.close()
    conn.close()


def read_all(sock: socket.socket) -> bytes:
    sock.settimeout(5.0)
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


class TestProcessConnection:

    def test_answers_one_request(self, app, conn_pair):
        conn, client = conn_pair
        client.sendall(b"GET /echo/hi HTTP/1.1\r\n\r\n")

        app._process_connection(conn)

        assert read_all(client).endswith(b"\r\n\r\nhi")

    def test_parse_error_is_400(self, app, conn_pair):
        conn, client = conn_pair
        client.sendall(b"garbage without separator")

        app._process_connection(conn)

        data = read_all(client)
        assert data.startswith(b"HTTP/1.1 400 Bad Request\r\n")
        assert b"Content-Type: text/plain" in data

    def test_handler_exception_is_500(self, conn_pair):
        conn, client = conn_pair
        server = HTTPServer(ServerConfig(port=0))

        @server.get("/boom")
        def boom(request, response):
            raise RuntimeError("boom")

        client.sendall(b"GET /boom HTTP/1.1\r\n\r\n")
        server._process_connection(conn)

        data = read_all(client)
        assert data.startswith(b"HTTP/1.1 500 Internal Server Error\r\n")
        assert data.endswith(b"Internal Server Error")

    def test_empty_read_sends_nothing(self, app, conn_pair):
        conn, client = conn_pair
        client.shutdown(socket.SHUT_WR)

        app._process_connection(conn)

        assert read_all(client) == b""

    def test_connection_closed_afterwards(self, app, conn_pair):
        conn, client = conn_pair
        client.sendall(b"GET / HTTP/1.1\r\n\r\n")

        app._process_connection(conn)

        assert conn.state.value == "closed"

    def test_post_writes_exact_body(self, app, conn_pair, files_dir, sample_post_request):
        conn, client = conn_pair
        client.sendall(sample_post_request)

        app._process_connection(conn)

        assert read_all(client) == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (files_dir / "number").read_bytes() == b"12345"
