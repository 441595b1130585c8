"""
=============================================================================
BASE MIDDLEWARE INTERFACE
=============================================================================

Defines the middleware protocol and the pipeline that chains middleware
around the router. Chain of Responsibility, with one twist: the response
already exists before the chain runs, and every layer edits it in place.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    PIPELINE - ONE RESPONSE OBJECT                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   (request, response) ─────────────────────────────────►            │
    │                                                                      │
    │   ┌──────────┐    ┌─────────────┐    ┌──────────┐                   │
    │   │ Logging  │───►│ Compression │───►│  Router  │                   │
    │   └────┬─────┘    └──────┬──────┘    └────┬─────┘                   │
    │        │                 │                │                          │
    │   [before]          [before]          [exec]                         │
    │   start timer       negotiate,        set status,                    │
    │                     set Content-      set body                       │
    │                     Encoding                                         │
    │        ▲                 ▲                │                          │
    │   [after]           [after]               │                          │
    │   access log        gzip body  ◄──────────┘                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Because the response is created by the connection driver (default 200 OK)
and passed down, a middleware can act on it BEFORE the router runs, which
is exactly what content-encoding negotiation needs.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# NextHandler is the signature for the next middleware or final handler.
# It mutates the response in place and returns nothing.
NextHandler = Callable[[HTTPRequest, HTTPResponse], None]


class Middleware(ABC):
    """
    Abstract base class for middleware.

    =========================================================================
    THE MIDDLEWARE CONTRACT
    =========================================================================

        class MyMiddleware(Middleware):
            def __call__(self, request, response, next):
                # before: inspect request, pre-set response headers
                next(request, response)     # <-- continue the chain
                # after: transform the finished response

    Skipping next() short-circuits the router.

    =========================================================================
    """

    @abstractmethod
    def __call__(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        next: NextHandler,
    ) -> None:
        """
        Process one request.

        Args:
            request: The parsed request (immutable).
            response: The response being built (mutable).
            next: The rest of the chain.
        """

    @property
    def name(self) -> str:
        """Middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())       # first added = outermost
        pipeline.add(CompressionMiddleware())

        handler = pipeline.wrap(router.handle)
        handler(request, response)

    Resulting call order:

        Logging(before) → Compression(before) → router
                                                   │
        Logging(after)  ← Compression(after)  ◄────┘
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def __len__(self) -> int:
        return len(self._middleware)

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """
        Append middleware (executed in the order added).

        Returns:
            Self for method chaining.
        """
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with every middleware in the pipeline.

        Given [MW1, MW2] and handler, builds MW1 → MW2 → handler by
        wrapping in reverse so the first-added middleware is outermost.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler,
    ) -> NextHandler:
        """
        Bind one middleware to the handler that follows it.

        The closure captures both, so each layer only sees its own next.
        """
        def wrapped(request: HTTPRequest, response: HTTPResponse) -> None:
            middleware(request, response, next_handler)

        wrapped.__name__ = f"{middleware.name}_wrapper"
        return wrapped
