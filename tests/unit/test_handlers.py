"""
Unit tests for request handlers.
"""

import io
import os
import sys
from pathlib import Path

import pytest

from tinyhttpd.handlers import FileHandler, root, echo, user_agent
from tinyhttpd.handlers import files as files_module
from tinyhttpd.http.request import HTTPRequest
from tinyhttpd.http.status_codes import HTTPStatus


def make_request(method="GET", path="/", headers=None, body=b"", **params) -> HTTPRequest:
    return HTTPRequest(
        method=method,
        path=path,
        headers=headers or [],
        body=body,
        path_params=params,
    )


class TestBasicHandlers:
    """Tests for root, echo and user-agent."""

    def test_root(self):
        """Test the root probe ignores the request entirely."""
        response = root(make_request("POST", "/", ["X: y"], b"ignored"))

        assert response.status == HTTPStatus.OK
        assert response.content_type is None
        assert response.content_length == 0
        assert response.body is None

    def test_echo(self):
        """Test echo returns the operand as text/plain."""
        response = echo(make_request(path="/echo/hello", text="hello"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/plain"
        assert response.content_length == 5
        assert response.body == b"hello"

    def test_echo_empty(self):
        """Test an empty operand gives an empty body."""
        response = echo(make_request(path="/echo/", text=""))
        assert response.body == b""
        assert response.content_length == 0

    def test_echo_not_decoded(self):
        """Test percent escapes are echoed verbatim."""
        assert echo(make_request(text="a%20b")).body == b"a%20b"

    def test_echo_utf8(self):
        """Test non-ASCII operands are sent as UTF-8."""
        response = echo(make_request(text="café"))
        assert response.body == "café".encode("utf-8")
        assert response.content_length == 5

    def test_user_agent(self):
        """Test the User-Agent value is reflected."""
        response = user_agent(make_request(headers=["Host: x", "User-Agent: test-client/1.0"]))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/plain"
        assert response.body == b"test-client/1.0"

    def test_user_agent_first_wins(self):
        """Test the first User-Agent line is used."""
        response = user_agent(make_request(headers=["User-Agent: a", "User-Agent: b"]))
        assert response.body == b"a"

    def test_user_agent_missing(self):
        """Test a missing header is a 400 with no body."""
        response = user_agent(make_request(headers=["user-agent: lowercase"]))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.content_length == 0


class TestFileHandler:
    """Tests for file GET and POST."""

    def test_retrieve(self, tmp_path: Path):
        """Test an existing file is served with its bytes."""
        (tmp_path / "note.txt").write_bytes(b"hello")
        files = FileHandler(str(tmp_path))

        response = files.retrieve(make_request(name="note.txt"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/plain"
        assert response.body == b"hello"

    def test_retrieve_binary(self, tmp_path: Path):
        """Test binary content and the default content type."""
        content = bytes(range(256)) * 4
        (tmp_path / "blob").write_bytes(content)

        response = FileHandler(str(tmp_path)).retrieve(make_request(name="blob"))

        assert response.content_type == "application/octet-stream"
        assert response.body == content
        assert response.content_length == 1024

    def test_retrieve_missing(self, tmp_path: Path):
        """Test a missing file is an empty 404."""
        response = FileHandler(str(tmp_path)).retrieve(make_request(name="nope.txt"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.content_length == 0
        assert response.body is None

    def test_retrieve_directory(self, tmp_path: Path):
        """Test a directory cannot be served."""
        (tmp_path / "sub").mkdir()
        response = FileHandler(str(tmp_path)).retrieve(make_request(name="sub"))
        assert response.status == HTTPStatus.NOT_FOUND

    @pytest.mark.parametrize("name", [".", ".."])
    def test_retrieve_dot_names(self, tmp_path: Path, name: str):
        """Test dot names resolve to directories and are not served."""
        response = FileHandler(str(tmp_path)).retrieve(make_request(name=name))
        assert response.status == HTTPStatus.NOT_FOUND

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits are not enforced",
    )
    def test_retrieve_unreadable(self, tmp_path: Path):
        """Test a file that cannot be opened is a 404."""
        path = tmp_path / "secret.txt"
        path.write_bytes(b"x")
        path.chmod(0)
        try:
            response = FileHandler(str(tmp_path)).retrieve(make_request(name="secret.txt"))
        finally:
            path.chmod(0o600)

        assert response.status == HTTPStatus.NOT_FOUND

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs /proc/self/mem")
    def test_retrieve_read_error(self):
        """Test a file that opens but fails to read is an empty 500."""
        # Offset 0 of our own address space is unmapped: open() works, read() is EIO
        response = FileHandler("/proc/self").retrieve(make_request(name="mem"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.content_length == 0
        assert response.body is None

    def test_retrieve_read_error_closes_file(self, tmp_path: Path, monkeypatch):
        """Test the opened file is closed when read() fails."""
        (tmp_path / "broken.txt").write_bytes(b"x")
        opened = []

        class FailingFile(io.BytesIO):
            def read(self, *args):
                raise OSError(5, "Input/output error")

        def fake_open(path, mode="r"):
            f = FailingFile()
            opened.append(f)
            return f

        monkeypatch.setattr(files_module, "open", fake_open, raising=False)
        response = FileHandler(str(tmp_path)).retrieve(make_request(name="broken.txt"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert len(opened) == 1 and opened[0].closed

    def test_store(self, tmp_path: Path):
        """Test the body is written verbatim."""
        files = FileHandler(str(tmp_path))
        response = files.store(make_request("POST", body=b"payload", name="out.bin"))

        assert response.status == HTTPStatus.CREATED
        assert response.content_length == 0
        assert response.body is None
        assert (tmp_path / "out.bin").read_bytes() == b"payload"

    def test_store_truncates(self, tmp_path: Path):
        """Test an existing file is replaced, not appended to."""
        (tmp_path / "f").write_bytes(b"a much longer old content")
        FileHandler(str(tmp_path)).store(make_request("POST", body=b"new", name="f"))

        assert (tmp_path / "f").read_bytes() == b"new"

    def test_store_empty_body(self, tmp_path: Path):
        """Test an empty body creates an empty file."""
        FileHandler(str(tmp_path)).store(make_request("POST", name="empty"))
        assert (tmp_path / "empty").read_bytes() == b""

    def test_store_into_missing_directory(self, tmp_path: Path):
        """Test a write failure is an empty 500."""
        files = FileHandler(str(tmp_path / "does-not-exist"))
        response = files.store(make_request("POST", body=b"x", name="a.txt"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.content_length == 0

    def test_store_onto_directory(self, tmp_path: Path):
        """Test writing over a directory name fails with 500."""
        response = FileHandler(str(tmp_path)).store(make_request("POST", body=b"x", name=".."))
        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_store_then_retrieve(self, tmp_path: Path):
        """Test a stored file can be read back."""
        files = FileHandler(str(tmp_path))
        files.store(make_request("POST", body=b"\x00\xffdata", name="x.png"))

        response = files.retrieve(make_request(name="x.png"))
        assert response.content_type == "image/png"
        assert response.body == b"\x00\xffdata"
