"""
=============================================================================
URL ROUTER
=============================================================================

Maps a parsed request onto a handler that edits the response in place.

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /echo/abc          paths = ["echo", "abc"]                     │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER (first registered, first matched)                    │   │
    │   │                                                              │   │
    │   │  GET  /echo/:text    → echo          ← MATCH {"text": "abc"} │   │
    │   │  GET  /files/:name   → files.read                            │   │
    │   │  GET  /user-agent    → user_agent                            │   │
    │   │  GET  /              → index                                 │   │
    │   │  POST /files/:name   → files.write                           │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   echo(request, response, text="abc")                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ROUTE PATTERNS
=============================================================================

Patterns are compared segment by segment against request.paths:

    Pattern            Segments              Matches
    ─────────────────  ────────────────────  ──────────────────────────────
    /                  [""]                  "/" only
    /user-agent        ["user-agent"]        "/user-agent" only
    /echo/:text        ["echo", ":text"]     "/echo/abc", "/echo/" (text="")

A ":name" segment matches any single segment, the empty one included.
The segment count must be equal, so "/echo/a/b" does not match
"/echo/:text".

=============================================================================
NO MATCH
=============================================================================

    GET      → 404 Not Found, body left unset
    others   → response left untouched (200 OK, no body)

The second rule is deliberately permissive: there is no 405.

A target that does not start with "/" ("*", "xuser-agent") matches no
route. Segments drop the leading character, so without this check
"xuser-agent" would look like "/user-agent".

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .request import HTTPRequest
from .response import HTTPResponse
from .status_codes import HTTPStatus

# handler(request, response, **params) -> None
Handler = Callable[..., None]


@dataclass
class Route:
    """
    A registered route.

        Route(
            path="/files/:name",
            method="GET",
            handler=files.read,
            _segments=["files", ":name"],
        )
    """

    path: str
    method: str
    handler: Handler
    _segments: List[str] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self._segments:
            self._segments = self.path[1:].split("/")

    def match(self, method: str, paths: List[str]) -> Optional[Dict[str, str]]:
        """
        Compare against a request.

        Returns:
            Extracted parameters when the route matches, None otherwise.
        """
        if method != self.method or len(paths) != len(self._segments):
            return None

        params: Dict[str, str] = {}
        for pattern, segment in zip(self._segments, paths):
            if pattern.startswith(":"):
                params[pattern[1:]] = segment
            elif pattern != segment:
                return None
        return params


@dataclass
class RouteMatch:
    """A matched route plus the parameters extracted from the path."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    Method + segment router.

    Routes are registered with add_route() or the decorators:

        router = Router()

        @router.get("/echo/:text")
        def echo(request, response, text):
            response.set_body(text)

    Handlers return nothing; they mutate the response they are given.
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        """Registered routes in precedence order."""
        return list(self._routes)

    def add_route(self, path: str, handler: Handler, method: str = "GET") -> Route:
        """
        Register a route.

        Args:
            path: Pattern starting with "/" (e.g. "/files/:name").
            handler: Callable taking (request, response, **params).
            method: HTTP method the route answers to.

        Returns:
            The registered Route.
        """
        if not path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {path!r}")

        route = Route(path=path, method=method.upper(), handler=handler)
        self._routes.append(route)
        return route

    def match(self, method: str, paths: List[str]) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path segments.
        """
        for route in self._routes:
            params = route.match(method, paths)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None

    def handle(self, request: HTTPRequest, response: HTTPResponse) -> None:
        """
        Dispatch a request, editing the response in place.

        This is the innermost handler of the middleware chain.
        """
        found = None
        if request.target.startswith("/"):
            found = self.match(request.method, request.paths)

        if found:
            found.route.handler(request, response, **found.params)
            return

        if request.method == "GET":
            response.set_status(HTTPStatus.NOT_FOUND)

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(self, path: str, method: str = "GET") -> Callable[[Handler], Handler]:
        """
        Decorator for registering routes.

            @router.route("/user-agent", method="GET")
            def user_agent(request, response):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method)
            return handler  # unchanged, so decorators can stack

        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET")

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST")
