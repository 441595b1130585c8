"""
=============================================================================
MIDDLEWARE FRAMEWORK
=============================================================================

Middleware wraps the router with cross-cutting behavior. Each layer gets
the request, the response under construction, and the rest of the chain:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    DEFAULT PIPELINE                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   (request, response)                                                │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌──────────────────────┐                                           │
    │   │ LoggingMiddleware     │ ──► access log line, timing              │
    │   └────────┬─────────────┘                                           │
    │            ▼                                                         │
    │   ┌──────────────────────┐                                           │
    │   │ CompressionMiddleware │ ──► gzip when Accept-Encoding offers it  │
    │   └────────┬─────────────┘                                           │
    │            ▼                                                         │
    │   ┌──────────────────────┐                                           │
    │   │ Router.handle         │ ──► route handlers                       │
    │   └──────────────────────┘                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog
from .compression import CompressionMiddleware, negotiate_encoding

__all__ = [
    # Base classes
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",

    # Built-in middleware
    "LoggingMiddleware",
    "RequestLog",
    "CompressionMiddleware",
    "negotiate_encoding",
]
