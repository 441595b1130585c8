"""
=============================================================================
HANDLERS MODULE
=============================================================================

Route handlers for the server's endpoints.

A handler receives the request, the response under construction and the
parameters captured from the path, and edits the response in place:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → RESPONSE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    Request                 Handler                 Response         │
    │   ┌─────────┐           ┌─────────┐           ┌─────────┐          │
    │   │ GET     │           │         │           │ 200 OK  │          │
    │   │ /echo/  │ ────────▶ │  echo   │ ────────▶ │         │          │
    │   │ abc     │  text=abc │         │ set_body  │ abc     │          │
    │   └─────────┘           └─────────┘           └─────────┘          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
DEFAULT ROUTES (in precedence order)
=============================================================================

    GET  /echo/:text    echo              body = text
    GET  /files/:name   FileHandler.read  only with a directory
    GET  /user-agent    user_agent        body = User-Agent header
    GET  /              index             200, no body
    POST /files/:name   FileHandler.write only with a directory

Without a directory the /files routes are not registered at all, so GET
falls through to the router's 404 and POST to its untouched 200.

=============================================================================
"""

import logging
import os
from typing import Optional, Union

from ..http.router import Router
from .basic import echo, user_agent, index
from .files import FileHandler, OutsideDirectoryError, FILE_MODE

logger = logging.getLogger(__name__)


def register_default_routes(
    router: Router,
    directory: Optional[Union[str, os.PathLike]] = None,
) -> Router:
    """
    Register the built-in routes on a router.

    Args:
        router: Router to populate.
        directory: Serving directory for /files/*, or None to leave those
                   routes out.

    Returns:
        The same router, for chaining.
    """
    files = FileHandler(directory) if directory is not None else None

    router.add_route("/echo/:text", echo, "GET")
    if files:
        router.add_route("/files/:name", files.read, "GET")
    router.add_route("/user-agent", user_agent, "GET")
    router.add_route("/", index, "GET")
    if files:
        router.add_route("/files/:name", files.write, "POST")
        logger.info(f"Serving files from {files.directory}")

    return router


__all__ = [
    "echo",
    "user_agent",
    "index",
    "FileHandler",
    "OutsideDirectoryError",
    "FILE_MODE",
    "register_default_routes",
]
