"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

Emits one access-log line per handled request, with timing.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default, Apache-style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [19/Oct/2026:10:55:36 +0000] "GET /echo/abc" 200 3 0.21ms
    │ ─────────────────────────────────────────────────────────────────── │
    │ IP            Timestamp          Method/Target  Status Size Duration│
    └─────────────────────────────────────────────────────────────────────┘

    JSON (one object per line):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ {"method": "GET", "target": "/echo/abc", "client_ip": "127.0.0.1", │
    │  "user_agent": "curl/8.4.0", "status_code": 200,                    │
    │  "content_length": 3, "duration_ms": 0.21, "timestamp": "..."}      │
    └─────────────────────────────────────────────────────────────────────┘

Size is the length of the body that goes on the wire, so with gzip
negotiated it is the compressed size. A response with no body logs 0.

Lines go to the "tinyhttp.access" logger, which can be tuned on its own:

    logging.getLogger("tinyhttp.access").setLevel(logging.WARNING)

The middleware only observes. It adds no headers to the response.

=============================================================================
"""

import time
import json
import logging
from dataclasses import dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("tinyhttp.access")

LOG_FORMATS = ("text", "json")


@dataclass
class RequestLog:
    """Structured access-log entry for one request."""

    method: str
    target: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "target": self.target,
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Should be FIRST in the pipeline so its timing covers everything else
    and it sees the final, compressed response:

        pipeline.add(LoggingMiddleware(log_format="json"))
        pipeline.add(CompressionMiddleware())

    A handler exception is logged at ERROR with its duration and re-raised
    for the connection driver to turn into a 500.
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" (Apache-style) or "json".
            log_level: Level the access lines are emitted at.
        """
        if log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format: {log_format!r}")
        self.log_format = log_format
        self.log_level = log_level

    def __call__(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        next: NextHandler,
    ) -> None:
        start_time = time.time()

        try:
            next(request, response)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.target} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        log_entry = RequestLog(
            method=request.method,
            target=request.target,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status_code),
            content_length=len(response.body) if response.body is not None else 0,
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(log_entry.to_dict()))
        else:
            logger.log(self.log_level, log_entry.to_text())
