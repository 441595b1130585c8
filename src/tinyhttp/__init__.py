"""
=============================================================================
TINYHTTP - A SMALL HTTP/1.1 SERVER ON RAW SOCKETS
=============================================================================

Serves a handful of endpoints on port 4221:

    GET  /                 200, empty
    GET  /echo/<text>      <text> as text/plain
    GET  /user-agent       the User-Agent header as text/plain
    GET  /files/<name>     file contents (needs --directory)
    POST /files/<name>     store the request body (needs --directory)

Responses are gzip-compressed when the client lists "gzip" in
Accept-Encoding. Every connection carries exactly one request.

=============================================================================
PACKAGE LAYOUT
=============================================================================

    tinyhttp/
    ├── core/           sockets: listener, connection, thread pool
    ├── http/           protocol: parser, response, router, status codes
    ├── middleware/     access logging, gzip
    ├── handlers/       echo, user-agent, index, files
    ├── config.py       ServerConfig
    ├── server.py       HTTPServer, create_app()
    └── __main__.py     python -m tinyhttp

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
