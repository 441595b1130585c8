"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Accumulates status, headers and body for one connection, then serializes
them to wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                     ← status line            │
    │    Content-Type: text/plain\r\n            ← headers, in the order  │
    │    Content-Length: 3\r\n                      they were first set   │
    │    \r\n                                    ← blank separator        │
    │    abc                                     ← body (may be absent)   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
MUTATE IN PLACE
=============================================================================

One HTTPResponse is created per connection in its default state
(200 OK, no headers, no body) and handed through the middleware chain.
Every stage edits the same object:

    CompressionMiddleware   set_header("Content-Encoding", "gzip")
    Router / handler        set_status(...), set_body(...), set_body_file(...)
    CompressionMiddleware   replace_body(gzip.compress(body))

The body setters keep two headers honest:

    set_body / set_body_file   recompute Content-Type AND Content-Length
    replace_body               recompute Content-Length only

to_bytes() adds nothing of its own (no Date, no Server, no implicit
Content-Length), so serializing an unchanged response twice gives the
same bytes, and a response whose body was never set goes out with no
Content-Length at all.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union
import logging
import os

from .status_codes import HTTPStatus, reason_phrase

logger = logging.getLogger(__name__)

TEXT_CONTENT_TYPE = "text/plain"
BINARY_CONTENT_TYPE = "application/octet-stream"

HeaderValue = Union[str, int]


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Header values are str or int. Content-Length is stored as an int and
    only turned into text at serialization time.
    """

    status_code: int = HTTPStatus.OK
    status_message: str = "OK"
    headers: Dict[str, HeaderValue] = field(default_factory=dict)
    body: Optional[bytes] = None
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE, e.g. "HTTP/1.1 200 OK".
        """
        return f"{self.version} {int(self.status_code)} {self.status_message}"

    # =========================================================================
    # SETTERS (all return self for chaining)
    # =========================================================================

    def set_status(self, code: int, message: Optional[str] = None) -> "HTTPResponse":
        """
        Overwrite the status code and message.

        No range validation is done; any integer is sent as-is.

        Args:
            code: Numeric status code.
            message: Reason phrase. Defaults to the standard phrase for
                     the code ("Unknown" if there is none).
        """
        self.status_code = code
        self.status_message = message if message is not None else reason_phrase(code)
        return self

    def set_header(self, name: str, value: HeaderValue) -> "HTTPResponse":
        """Set one header, replacing any previous value."""
        self.headers[name] = value
        return self

    def set_body(self, text: str) -> "HTTPResponse":
        """
        Use a text body.

        Sets Content-Type to text/plain and Content-Length to the number
        of UTF-8 bytes (not characters):

            set_body("héllo")  →  Content-Length: 6
        """
        # surrogateescape lets text that came from request bytes go back out unchanged
        data = text.encode("utf-8", errors="surrogateescape")
        self.headers["Content-Type"] = TEXT_CONTENT_TYPE
        self.headers["Content-Length"] = len(data)
        self.body = data
        return self

    def set_body_file(self, path: Union[str, os.PathLike]) -> "HTTPResponse":
        """
        Use the contents of a file as the body.

        =====================================================================
        ERROR MAPPING
        =====================================================================

        Every read failure becomes 404 Not Found, whatever the cause:

            FileNotFoundError   → 404
            PermissionError     → 404
            IsADirectoryError   → 404

        The error text is sent as a text/plain body so the client can see
        what went wrong.

        =====================================================================

        Args:
            path: File to read.
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            logger.debug(f"Could not read {path}: {e}")
            self.set_status(HTTPStatus.NOT_FOUND)
            return self.set_body(f"Error reading file: {e}")

        self.headers["Content-Type"] = BINARY_CONTENT_TYPE
        self.headers["Content-Length"] = len(data)
        self.body = data
        return self

    def replace_body(self, data: bytes) -> "HTTPResponse":
        """
        Swap the body bytes, keeping Content-Type.

        Used after a transformation of an existing body (compression),
        where only the length changes meaning.
        """
        self.headers["Content-Length"] = len(data)
        self.body = data
        return self

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

            HTTP/1.1 404 Not Found\\r\\n
            Content-Encoding: gzip\\r\\n
            \\r\\n
            (no body)

        Returns:
            Status line, headers, blank line and body as bytes.
        """
        lines = [self.status_line]

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"

        if self.body is None:
            return head
        return head + self.body
