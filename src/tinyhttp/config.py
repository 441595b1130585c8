"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All server options in one dataclass.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m tinyhttp --directory /tmp/data                   │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── TINYHTTP_PORT=3000 python -m tinyhttp                      │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    FILES
    - directory

    THREADING SETTINGS
    - min_workers, max_workers

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to. All interfaces by default.
    """

    port: int = 4221
    """
    The port number to listen on. 0 lets the OS pick a free one.
    """

    backlog: int = 128
    """
    Maximum number of queued connections.
    """

    buffer_size: int = 4096
    """
    Size of the single read per connection, in bytes. A request larger
    than this is cut off at this size.
    """

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds. None = blocking.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[str] = None
    """
    Directory served by /files/<name>. None disables those routes.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """
    Worker threads created at startup.
    """

    max_workers: int = 32
    """
    Upper bound the pool grows to under load.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    log_format: str = "text"
    """
    Access log format: 'text' (Apache-style) or 'json'.
    """

    @property
    def log_level_value(self) -> int:
        """log_level as a logging module constant."""
        return getattr(logging, self.log_level.upper())

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        TINYHTTP_HOST       Server host (default: 0.0.0.0)
        TINYHTTP_PORT       Server port (default: 4221)
        TINYHTTP_DIRECTORY  Files directory (default: None)
        TINYHTTP_LOG_LEVEL  Logging level (default: INFO)
        TINYHTTP_WORKERS    Max worker threads (default: 32). min_workers is
                            lowered to match when the value is below it.

        =====================================================================

        Raises:
            ValueError: If a numeric variable is not an integer.
        """
        max_workers = int(os.getenv("TINYHTTP_WORKERS", "32"))

        return cls(
            host=os.getenv("TINYHTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("TINYHTTP_PORT", "4221")),
            directory=os.getenv("TINYHTTP_DIRECTORY") or None,
            log_level=os.getenv("TINYHTTP_LOG_LEVEL", "INFO"),
            min_workers=min(cls.min_workers, max_workers),
            max_workers=max_workers,
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails before the socket is
        bound, not on the first request.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format: {self.log_format}")

        if self.directory is not None and not os.path.isdir(self.directory):
            raise ValueError(f"Not a directory: {self.directory}")
