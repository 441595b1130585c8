"""
=============================================================================
FILE HANDLER
=============================================================================

Reads and writes files under one serving directory:

    GET  /files/<name>   → body = contents of <directory>/<name>
    POST /files/<name>   → <directory>/<name> = request body

The name is the second path segment, taken verbatim (no URL decoding).
Since it is a single segment it can never contain "/", but it can still
be "..", "." or empty, so every name goes through a containment check.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /files/.. HTTP/1.1                                             │
    │                                                                      │
    │  Unchecked this would read <directory>/.. (the PARENT directory).   │
    │                                                                      │
    │  Protection:                                                         │
    │  1. Resolve the full path (normalizes .. and follows symlinks)      │
    │  2. Require it to be strictly INSIDE the directory                  │
    │  3. Otherwise treat it like any other I/O failure of the route      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

        full_path = (directory / name).resolve()
        directory in full_path.parents     # False for "..", "." and ""

=============================================================================
ERROR MAPPING
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ Route     │ Failure                      │ Response                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │ GET       │ missing, unreadable, dir,    │ 404 Not Found            │
    │           │ outside the directory        │ "Error reading file: …"  │
    ├─────────────────────────────────────────────────────────────────────┤
    │ POST      │ unwritable, dir,             │ 400 Bad Request          │
    │           │ outside the directory        │ "Error writing file: …"  │
    └─────────────────────────────────────────────────────────────────────┘

Filesystem errors stop here. Nothing raised by the filesystem reaches the
router or the connection.

=============================================================================
"""

import os
import logging
from pathlib import Path
from typing import Union

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)

# rw-r--r--, before the process umask
FILE_MODE = 0o644


class OutsideDirectoryError(PermissionError):
    """The requested name resolves outside the serving directory."""


class FileHandler:
    """
    Handler pair for the /files/<name> routes.

        files = FileHandler("/tmp/data")
        router.add_route("/files/:name", files.read, "GET")
        router.add_route("/files/:name", files.write, "POST")

    The directory is fixed at construction time and shared read-only by
    every worker thread. Two connections writing the same file at once is
    an accepted race: last writer wins.
    """

    def __init__(self, directory: Union[str, os.PathLike]):
        """
        Args:
            directory: Serving directory. Must exist.
        """
        self.directory = Path(directory).resolve()

        if not self.directory.is_dir():
            raise ValueError(f"Files directory does not exist: {directory}")

    def resolve(self, name: str) -> Path:
        """
        Map a file name to a path inside the directory.

        Raises:
            OutsideDirectoryError: If the name escapes the directory or
                                   names the directory itself.
        """
        full_path = (self.directory / name).resolve()
        if self.directory not in full_path.parents:
            raise OutsideDirectoryError(f"Path outside served directory: {name!r}")
        return full_path

    def read(self, request: HTTPRequest, response: HTTPResponse, name: str) -> None:
        """GET /files/<name>: send the file as application/octet-stream."""
        try:
            path = self.resolve(name)
        except OutsideDirectoryError as e:
            logger.warning(f"Refused read of {name!r} from {request.client_address[0]}")
            response.set_status(HTTPStatus.NOT_FOUND)
            response.set_body(f"Error reading file: {e}")
            return

        response.set_body_file(path)

    def write(self, request: HTTPRequest, response: HTTPResponse, name: str) -> None:
        """
        POST /files/<name>: store the request body.

        The file is created or truncated, and the body bytes are written
        exactly as received. Success is 201 Created with no body.
        """
        try:
            path = self.resolve(name)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
            with os.fdopen(fd, "wb") as f:
                f.write(request.body_bytes)
        except OSError as e:
            logger.warning(f"Could not write {name!r}: {e}")
            response.set_status(HTTPStatus.BAD_REQUEST)
            response.set_body(f"Error writing file: {e}")
            return

        logger.debug(f"Wrote {len(request.body_bytes)} bytes to {path}")
        response.set_status(HTTPStatus.CREATED)
