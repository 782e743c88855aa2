"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Callable, Generator, List, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttpd import HTTPServer, ServerConfig, create_app


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/hello HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"hello, file"
    return (
        b"POST /files/note.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class RawResponse:
    """A response read off the wire, split into its parts."""

    def __init__(self, raw: bytes):
        self.raw = raw
        head, _, self.body = raw.partition(b"\r\n\r\n")
        lines = head.decode("utf-8").split("\r\n")
        self.status_line = lines[0]
        self.status = int(self.status_line.split(" ")[1])
        self.header_lines = lines[1:]
        self.headers = dict(line.split(": ", 1) for line in self.header_lines)


class RawClient:
    """Speaks to the server over plain sockets, one request per connection."""

    def __init__(self, port: int):
        self.port = port

    def connect(self) -> socket.socket:
        sock = socket.create_connection(('127.0.0.1', self.port), timeout=5.0)
        return sock

    def send(self, data: bytes, chunks: Optional[List[int]] = None, delay: float = 0.0) -> bytes:
        """
        Send `data` (optionally split at the given sizes) and read until EOF.
        """
        with self.connect() as sock:
            if chunks:
                offset = 0
                for size in chunks:
                    sock.sendall(data[offset:offset + size])
                    offset += size
                    if delay:
                        time.sleep(delay)
                sock.sendall(data[offset:])
            else:
                sock.sendall(data)
            return self.read_all(sock)

    def request(self, data: bytes, **kwargs) -> RawResponse:
        return RawResponse(self.send(data, **kwargs))

    @staticmethod
    def read_all(sock: socket.socket) -> bytes:
        received = b""
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                return received
            received += chunk


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: threading.Thread = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port},
            daemon=True
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """Serving directory for file routes."""
    directory = tmp_path / "files"
    directory.mkdir()
    return directory


@pytest.fixture
def test_server(free_port: int, files_dir: Path) -> Generator[TestServer, None, None]:
    """A running server with the standard routes."""
    server = create_app(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        directory=str(files_dir),
        log_level="WARNING",
    ))

    test_srv = TestServer(server, free_port)
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def client(test_server: TestServer) -> RawClient:
    """Raw socket client pointed at the running test server."""
    return RawClient(test_server.port)


@pytest.fixture
def serve() -> Generator[Callable[[HTTPServer], RawClient], None, None]:
    """Start a custom-built server; returns a client for it."""
    started: List[TestServer] = []

    def start(server: HTTPServer) -> RawClient:
        test_srv = TestServer(server, server.config.port)
        test_srv.start()
        started.append(test_srv)
        return RawClient(test_srv.port)

    yield start

    for test_srv in started:
        test_srv.stop()
