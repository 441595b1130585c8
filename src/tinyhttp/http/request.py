"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes of one socket read into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    POST /files/notes.txt HTTP/1.1\r\n      ← line 0: request line   │
    │    Host: localhost:4221\r\n                ← header lines           │
    │    User-Agent: curl/8.4.0\r\n                                       │
    │    Content-Length: 5\r\n                                            │
    │    \r\n                                    ← blank separator        │
    │    hello                                   ← last line: body        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Splitting the text on CRLF gives a list of lines. The layout of that list
is fixed for a request that fits in one read:

    lines[0]        request line   "METHOD SP TARGET SP VERSION"
    lines[1:-2]     header lines   "Name: value"
    lines[-2]       ""             (the blank separator)
    lines[-1]       body           (possibly "")

=============================================================================
PATH SEGMENTS
=============================================================================

The router works on segments, not on the raw target:

    "/"                  → [""]
    "/echo/abc"          → ["echo", "abc"]
    "/files/"            → ["files", ""]
    "/user-agent"        → ["user-agent"]

The leading slash is dropped, the rest is split on "/" with empty segments
kept, so the segment list is always a pure function of the target.

=============================================================================
KNOWN LIMITS
=============================================================================

1. A body containing CRLF is truncated to its last line. The server only
   reads one buffer per connection and has no framing, so multi-line
   bodies are out of scope.

2. Headers are NOT case-normalized. "User-Agent" and "user-agent" are
   different keys, and a repeated header keeps only its last value.

3. The target is not URL-decoded. "/echo/a%20b" echoes "a%20b".

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple
import logging

from .status_codes import HTTPStatus

logger = logging.getLogger(__name__)

# Matches the connection read buffer; larger inputs cannot come off the wire.
DEFAULT_MAX_REQUEST_SIZE = 4096

# Surrogate escapes map undecodable bytes to lone surrogates and back, so a
# binary body survives the trip through str unchanged.
_TEXT_ERRORS = "surrogateescape"


class HTTPParseError(Exception):
    """
    Raised when raw bytes cannot be turned into a request.

    Carries the HTTP status the connection should answer with:

        400 Bad Request       - no separator, bad request line
        413 Payload Too Large - input exceeds the parser's size limit
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Built once per connection and never modified afterwards (frozen).

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Request method token ("GET", "POST", ...)

        target:         Path and query exactly as sent ("/echo/abc?x=1")

        paths:          Target split into segments, see module docstring

        version:        Protocol token ("HTTP/1.1")

        headers:        Header name → trimmed value, names kept as sent

        body:           Everything after the blank line, as text

        client_address: (ip, port) of the peer, used for access logs

    =========================================================================
    """

    method: str
    target: str
    paths: List[str] = field(default_factory=list)
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    client_address: Tuple[str, int] = ("", 0)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Look up a header by its exact name.

        Args:
            name: Header name, matched case-sensitively.
            default: Value returned when the header is absent.
        """
        return self.headers.get(name, default)

    @property
    def user_agent(self) -> str:
        """User-Agent header value, "" when the client sent none."""
        return self.get_header("User-Agent")

    @property
    def accept_encoding(self) -> str:
        """Raw Accept-Encoding header value, "" when absent."""
        return self.get_header("Accept-Encoding")

    @property
    def body_bytes(self) -> bytes:
        """The body re-encoded to the exact bytes received."""
        return self.body.encode("utf-8", errors=_TEXT_ERRORS)


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw bytes
            │
            ▼
        1. Size check           too large?       → HTTPParseError(413)
        2. Decode + find \\r\\n\\r\\n  missing?        → HTTPParseError(400)
        3. Split on CRLF
        4. Request line         not 3 tokens?    → HTTPParseError(400)
        5. Header lines         no colon?        → skipped
        6. Last line is body
            │
            ▼
        HTTPRequest

    The parser holds no per-request state, so one instance can be shared
    by every worker thread.
    """

    def __init__(self, max_request_size: int = DEFAULT_MAX_REQUEST_SIZE):
        """
        Args:
            max_request_size: Largest accepted input in bytes.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse one request.

        Args:
            data: Bytes from a single socket read.
            client_address: Peer (ip, port) to attach to the request.

        Returns:
            The parsed request.

        Raises:
            HTTPParseError: If the input is too large, has no header
                            terminator, or a malformed request line.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=HTTPStatus.PAYLOAD_TOO_LARGE,
            )

        text = data.decode("utf-8", errors=_TEXT_ERRORS)
        if "\r\n\r\n" not in text:
            raise HTTPParseError("Incomplete request: no header terminator")

        lines = text.split("\r\n")

        method, target, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:-2])

        return HTTPRequest(
            method=method,
            target=target,
            paths=split_target(target),
            version=version,
            headers=headers,
            body=lines[-1],
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str, str]:
        """
        Split "METHOD SP TARGET SP VERSION" into its three tokens.

        Splitting is on single spaces, so doubled spaces produce empty
        tokens and fail the count check.
        """
        parts = line.split(" ")
        if len(parts) != 3:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, version = parts
        return method, target, version

    def _parse_headers(self, lines: List[str]) -> Dict[str, str]:
        """
        Parse "Name: value" lines.

        The split happens at the FIRST colon, so values may contain
        colons ("Host: localhost:4221"). Later duplicates overwrite
        earlier ones.
        """
        headers: Dict[str, str] = {}

        for line in lines:
            name, sep, value = line.partition(":")
            if not sep:
                logger.debug(f"Skipping header line without colon: {line!r}")
                continue
            headers[name.strip()] = value.strip()

        return headers


def split_target(target: str) -> List[str]:
    """
    Split a request target into path segments.

    Args:
        target: Raw target, expected to start with "/".

    Returns:
        Segments in URL order, empty segments preserved.
    """
    return target[1:].split("/")


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_size: int = DEFAULT_MAX_REQUEST_SIZE,
) -> HTTPRequest:
    """
    Convenience wrapper: build a RequestParser and parse in one call.
    """
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(data, client_address)
