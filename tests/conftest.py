"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttp import HTTPServer, ServerConfig, create_app
from tinyhttp.http import HTTPRequest, parse_request


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: foobar/1.2.3\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"12345"
    return (
        b"POST /files/number HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        b"Content-Length: 5\r\n"
        b"\r\n"
    ) + body


@pytest.fixture
def make_request():
    """Build an HTTPRequest from a method, target and headers."""
    def _make(
        method: str = "GET",
        target: str = "/",
        headers: Optional[dict] = None,
        body: bytes = b"",
    ) -> HTTPRequest:
        lines = [f"{method} {target} HTTP/1.1"]
        for name, value in (headers or {}).items():
            lines.append(f"{name}: {value}")
        raw = ("\r\n".join(lines) + "\r\n\r\n").encode() + body
        return parse_request(raw, ("127.0.0.1", 54321))

    return _make


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """Serving directory with one known file in it."""
    directory = tmp_path / "files"
    directory.mkdir()
    (directory / "foo").write_bytes(b"Hello, World!")
    return directory


@pytest.fixture
def config(files_dir: Path) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        directory=str(files_dir),
        log_level="WARNING",
    )


@pytest.fixture
def app(config: ServerConfig) -> HTTPServer:
    """Application with default routes and middleware, not listening."""
    return create_app(config)


class LiveServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes and read the whole response until close."""
        with socket.create_connection(self.address, timeout=5.0) as sock:
            sock.sendall(raw)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def live_server(app: HTTPServer) -> Generator[LiveServer, None, None]:
    """A listening server on a free port, stopped after the test."""
    server = LiveServer(app)
    server.start()

    yield server

    server.stop()


def split_response(data: bytes) -> Tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode().split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def parse_response():
    """The split_response helper, as a fixture."""
    return split_response
