"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server actually emits, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK            - echo, user-agent, files (read), /     │
    │        │ 201 Created       - files (write) succeeded               │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request   - unparseable request, write failed     │
    │        │ 404 Not Found     - unknown GET target, read failed       │
    │        │ 413 Payload Too Large - parser size limit exceeded        │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - a handler raised              │
    └────────┴───────────────────────────────────────────────────────────┘

Responses carry the code and the message as two separate fields, so any
integer may be sent. reason_phrase() falls back to "Unknown" for codes
that are not listed here.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # Request handled, body may be empty
    CREATED = 201                   # File written under the serving directory

    BAD_REQUEST = 400               # Malformed request or failed write
    NOT_FOUND = 404                 # No route, or file could not be read
    PAYLOAD_TOO_LARGE = 413         # Raw request exceeded the parser limit

    INTERNAL_SERVER_ERROR = 500     # Handler raised unexpectedly

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── phrase
                      └───────── code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def reason_phrase(code: int) -> str:
    """
    Look up the reason phrase for any integer code.

    Args:
        code: Numeric status code.

    Returns:
        The standard phrase, or "Unknown" when the code is not registered.
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "Unknown"
