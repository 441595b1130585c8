"""
Unit tests for HTTP response building.
"""

import pytest

from tinyhttp.http.response import (
    HTTPResponse,
    TEXT_CONTENT_TYPE,
    BINARY_CONTENT_TYPE,
)
from tinyhttp.http.status_codes import HTTPStatus, reason_phrase


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_default_response(self):
        """Test that a fresh response is 200 OK with nothing else."""
        response = HTTPResponse()

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_status_line(self):
        """Test status line generation."""
        response = HTTPResponse()
        assert response.status_line == "HTTP/1.1 200 OK"

        response.set_status(HTTPStatus.NOT_FOUND)
        assert response.status_line == "HTTP/1.1 404 Not Found"

    def test_set_status_custom_message(self):
        response = HTTPResponse().set_status(299, "Fine I Guess")

        assert response.status_line == "HTTP/1.1 299 Fine I Guess"

    def test_set_status_unknown_code(self):
        response = HTTPResponse().set_status(799)

        assert response.status_line == "HTTP/1.1 799 Unknown"

    def test_set_body(self):
        response = HTTPResponse().set_body("abc")

        assert response.headers == {"Content-Type": "text/plain", "Content-Length": 3}
        assert response.body == b"abc"
        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_content_length_counts_utf8_bytes(self):
        response = HTTPResponse().set_body("héllo")

        assert response.headers["Content-Length"] == 6

    def test_empty_body_has_zero_length(self):
        response = HTTPResponse().set_body("")

        assert response.headers["Content-Length"] == 0
        assert response.to_bytes().endswith(b"Content-Length: 0\r\n\r\n")

    def test_headers_keep_insertion_order(self):
        response = (HTTPResponse()
            .set_header("Content-Encoding", "gzip")
            .set_body("x"))

        head = response.to_bytes().split(b"\r\n\r\n")[0]
        assert head.split(b"\r\n")[1:] == [
            b"Content-Encoding: gzip",
            b"Content-Type: text/plain",
            b"Content-Length: 1",
        ]

    def test_set_header_chaining(self):
        """Test method chaining for headers."""
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers["X-One"] == "1"
        assert response.headers["X-Two"] == "2"

    def test_set_header_replaces(self):
        response = HTTPResponse().set_header("X-A", "1").set_header("X-A", "2")

        assert response.to_bytes().count(b"X-A") == 1
        assert response.headers["X-A"] == "2"

    def test_to_bytes_is_idempotent(self):
        response = HTTPResponse().set_body("same")

        assert response.to_bytes() == response.to_bytes()

    def test_replace_body_keeps_content_type(self):
        response = HTTPResponse().set_body("abcdef").replace_body(b"xy")

        assert response.headers["Content-Type"] == TEXT_CONTENT_TYPE
        assert response.headers["Content-Length"] == 2
        assert response.body == b"xy"


class TestSetBodyFile:

    def test_reads_file(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"\x00\x01binary")

        response = HTTPResponse().set_body_file(path)

        assert response.status_code == 200
        assert response.headers["Content-Type"] == BINARY_CONTENT_TYPE
        assert response.headers["Content-Length"] == 8
        assert response.body == b"\x00\x01binary"

    def test_missing_file_is_404_with_message(self, tmp_path):
        response = HTTPResponse().set_body_file(tmp_path / "nope")

        assert response.status_code == 404
        assert response.status_message == "Not Found"
        assert response.headers["Content-Type"] == TEXT_CONTENT_TYPE
        assert response.body.startswith(b"Error reading file: ")

    def test_directory_is_404(self, tmp_path):
        response = HTTPResponse().set_body_file(tmp_path)

        assert response.status_code == 404
        assert response.body.startswith(b"Error reading file: ")


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.CREATED.phrase == "Created"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.phrase == "Internal Server Error"

    def test_is_error(self):
        assert not HTTPStatus.CREATED.is_error
        assert HTTPStatus.NOT_FOUND.is_error

    @pytest.mark.parametrize("code,phrase", [
        (200, "OK"),
        (413, "Payload Too Large"),
        (418, "Unknown"),
    ])
    def test_reason_phrase(self, code, phrase):
        assert reason_phrase(code) == phrase
