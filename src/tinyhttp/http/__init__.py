"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows about HTTP message syntax, with no sockets involved.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   b"GET /echo/abc HTTP/1.1\r\nHost: ...\r\n\r\n"            │
    │ Output:  HTTPRequest(method="GET", paths=["echo", "abc"], ...)      │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE BUILDER (response.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   HTTPResponse().set_body("abc")                             │
    │ Output:  b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n..."     │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   GET ["echo", "abc"]                                        │
    │ Output:  echo(request, response, text="abc")                        │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ STATUS CODES (status_codes.py)                                      │
    │ ─────────────────────────────────────────────────────────────────── │
    │ HTTPStatus.NOT_FOUND → 404, phrase="Not Found"                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import HTTPResponse, TEXT_CONTENT_TYPE, BINARY_CONTENT_TYPE
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus, reason_phrase

__all__ = [
    # Request
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    # Response
    "HTTPResponse",
    "TEXT_CONTENT_TYPE",
    "BINARY_CONTENT_TYPE",
    # Routing
    "Router",
    "Route",
    "RouteMatch",
    # Status
    "HTTPStatus",
    "reason_phrase",
]
