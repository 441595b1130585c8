"""
=============================================================================
COMPRESSION MIDDLEWARE
=============================================================================

Negotiates gzip from the request's Accept-Encoding header and compresses
the response body once the router is done with it.

=============================================================================
CONTENT NEGOTIATION
=============================================================================

    Request:
    ┌───────────────────────────────────────────────────────────────┐
    │ GET /echo/abc HTTP/1.1                                        │
    │ Accept-Encoding: identity, gzip                               │
    │                  ────┬───  ──┬─                               │
    │                      │       └── recognized                   │
    │                      └── ignored                              │
    └───────────────────────────────────────────────────────────────┘

    Response:
    ┌───────────────────────────────────────────────────────────────┐
    │ HTTP/1.1 200 OK                                               │
    │ Content-Encoding: gzip                                        │
    │ Content-Type: text/plain                                      │
    │ Content-Length: 23      (compressed size)                     │
    │                                                               │
    │ [gzip compressed body]                                        │
    └───────────────────────────────────────────────────────────────┘

The list is split on commas and each entry trimmed. Only the exact token
"gzip" is recognized; anything else ("br", "deflate", "invalid-scheme")
leaves the response untouched.

=============================================================================
TWO PHASES
=============================================================================

    BEFORE next():  gzip offered?  → Content-Encoding: gzip
    AFTER next():   Content-Encoding == gzip AND body is not None
                                   → body = gzip(body), Content-Length updated

The header is set before the router runs, so it is present even on a
bodiless 404. The body is compressed unconditionally: no size threshold,
no content-type filter, no "only if smaller" check. A client that asked
for gzip always gets gzip.

=============================================================================
"""

import gzip
from typing import Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse

GZIP = "gzip"


def negotiate_encoding(accept_encoding: str) -> Optional[str]:
    """
    Pick a content coding from an Accept-Encoding value.

    Args:
        accept_encoding: Raw header value, e.g. "deflate, gzip".

    Returns:
        "gzip" if offered, otherwise None.
    """
    for scheme in accept_encoding.split(","):
        if scheme.strip() == GZIP:
            return GZIP
    return None


class CompressionMiddleware(Middleware):
    """
    Response compression middleware.

    =========================================================================
    MIDDLEWARE POSITION
    =========================================================================

    Place it directly around the router so the access log (outermost)
    records the compressed size that actually goes on the wire:

        pipeline.add(LoggingMiddleware())
        pipeline.add(CompressionMiddleware())
        handler = pipeline.wrap(router.handle)

    =========================================================================
    """

    def __init__(self, level: int = 6):
        """
        Args:
            level: gzip compression level (1 = fastest, 9 = smallest).
        """
        if not 0 <= level <= 9:
            raise ValueError(f"Invalid gzip level: {level}")
        self.level = level

    def __call__(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        next: NextHandler,
    ) -> None:
        encoding = negotiate_encoding(request.accept_encoding)
        if encoding:
            response.set_header("Content-Encoding", encoding)

        next(request, response)

        self.encode(response)

    def encode(self, response: HTTPResponse) -> None:
        """
        Compress the body if the response is marked for gzip.

        Responses with no body or without Content-Encoding: gzip pass
        through unchanged.
        """
        if response.headers.get("Content-Encoding") != GZIP:
            return
        if response.body is None:
            return

        response.replace_body(gzip.compress(response.body, compresslevel=self.level))
