"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: socket server, thread pool, request parser,
middleware pipeline and router.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                             │
    │        │ Connection                                                  │
    │        ▼                                                             │
    │   ThreadPool.submit(_process_connection, conn)                      │
    │        │                                                             │
    │        ▼  (worker thread)                                            │
    │   conn.read_request()          one recv(), None → close              │
    │        │                                                             │
    │        ▼                                                             │
    │   RequestParser.parse()        HTTPParseError → 400 + text, close   │
    │        │                                                             │
    │        ▼                                                             │
    │   HTTPResponse()               200 OK, no headers, no body          │
    │        │                                                             │
    │        ▼                                                             │
    │   Logging → Compression → Router   exception → 500 + text, close   │
    │        │                                                             │
    │        ▼                                                             │
    │   conn.send_response(response.to_bytes())                           │
    │        │                                                             │
    │        ▼                                                             │
    │   conn.close()                 always                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every failure above is scoped to its own connection. A bad request, a
crashing handler or a vanished client is logged and that connection is
closed; the accept loop and the other workers keep going.

=============================================================================
"""

import logging
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus, Router,
)
from .http.router import Handler
from .middleware import (
    MiddlewarePipeline, Middleware, NextHandler,
    LoggingMiddleware, CompressionMiddleware,
)
from .handlers import register_default_routes


logger = logging.getLogger(__name__)

# Bounded wait for queued connections on shutdown
SHUTDOWN_TIMEOUT = 5.0


class HTTPServer:
    """
    Multi-threaded HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=4221))

        @server.get("/echo/:text")
        def echo(request, response, text):
            response.set_body(text)

        server.use(LoggingMiddleware())
        server.use(CompressionMiddleware())

        server.run()   # blocks until SIGINT/SIGTERM or shutdown()

    Most callers want create_app(), which registers the built-in routes
    and middleware.

    =========================================================================
    TESTING WITHOUT SOCKETS
    =========================================================================

        response = server.handle_request(request)

    runs the same middleware chain and router a connection would, and
    returns the finished response.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults apply if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)

        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
        )

        # A single read never returns more than buffer_size bytes
        self._parser = RequestParser(max_request_size=self.config.buffer_size)

        self._router = Router()
        self._middleware = MiddlewarePipeline()

        # Built from the middleware and router on first use
        self._handler: Optional[NextHandler] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware. The first added runs outermost.

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        self._handler = None
        return self

    @property
    def router(self) -> Router:
        return self._router

    def route(self, path: str, method: str = "GET"):
        """Register a route handler for the given method."""
        return self._router.route(path, method)

    def get(self, path: str):
        """Register a GET route."""
        return self._router.get(path)

    def post(self, path: str):
        """Register a POST route."""
        return self._router.post(path)

    def add_route(self, path: str, handler: Handler, method: str = "GET"):
        return self._router.add_route(path, handler, method)

    @property
    def address(self):
        """The (host, port) the server is bound to, once running."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener accepts connections."""
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_request(self, request: HTTPRequest) -> HTTPResponse:
        """
        Run one request through the middleware chain and router.

        Exceptions raised by handlers propagate to the caller.

        Returns:
            The response, starting from 200 OK with no headers or body.
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)

        response = HTTPResponse()
        self._handler(request, response)
        return response

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening address cannot be bound.
        """
        self._setup_logging()

        self._handler = self._middleware.wrap(self._router.handle)

        self._thread_pool.start()

        for route in self._router.routes:
            logger.debug(f"Route {route.method} {route.path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """
        Ask a running server to stop. Safe to call from any thread;
        run() returns once queued connections are drained.
        """
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure the root logger from config.log_level."""
        level = self.config.log_level_value

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("tinyhttp").setLevel(level)

    def _shutdown(self):
        """
        Graceful shutdown: the listener is already closed, so drain the
        queued connections and stop the workers.
        """
        logger.info("Shutting down server...")
        logger.debug(f"Worker pool before drain: {self._thread_pool.stats}")

        self._thread_pool.shutdown(wait=True, timeout=SHUTDOWN_TIMEOUT)

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Queue a connection for a worker. Called by SocketServer for each
        accepted connection.
        """
        try:
            self._thread_pool.submit(self._process_connection, conn)
        except RuntimeError as e:
            logger.warning(f"[{conn.id}] Rejecting connection: {e}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Handle exactly one request on a connection (worker thread).

        The connection is closed on every path out of this method.
        """
        with conn:
            raw_request = conn.read_request()
            if raw_request is None:
                return

            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                self._send_error(conn, e.status_code, str(e))
                return

            try:
                response = self.handle_request(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                self._send_error(
                    conn, HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error"
                )
                return

            conn.send_response(response.to_bytes())

    def _send_error(self, conn: Connection, status: int, message: str):
        """
        Send a text/plain error response for failures outside the router
        (parse errors, handler crashes).
        """
        response = HTTPResponse().set_status(status).set_body(message)
        conn.send_response(response.to_bytes())


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Build a server with the built-in routes and middleware.

        app = create_app(ServerConfig(directory="/tmp/data"))
        app.run()

    Middleware, outermost first: access logging, then gzip compression.
    The /files routes are registered only when config.directory is set.

    Raises:
        ValueError: If the configuration is invalid.
    """
    config = config or ServerConfig()

    server = HTTPServer(config)
    server.use(LoggingMiddleware(log_format=config.log_format))
    server.use(CompressionMiddleware())

    register_default_routes(server.router, config.directory)

    return server
