"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: read a request, send a response, close.

=============================================================================
SINGLE-READ FRAMING
=============================================================================

TCP is a byte stream. It does not preserve message boundaries, so a
request can arrive split over several segments:

    Client sends:  "GET /echo/abc HTTP/1.1\r\nHost: x\r\n\r\n"

    Possible arrival:
        First recv():  "GET /echo/abc HTTP/1.1\r\nHo"
        Second recv(): "st: x\r\n\r\n"

This server does exactly ONE recv() of up to buffer_size bytes per
connection and treats whatever arrives as the whole request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ recv(4096)                                                          │
    │   ├── b""            → client closed, nothing to answer             │
    │   ├── complete       → parsed and answered                          │
    │   ├── split header   → no "\r\n\r\n", parser answers 400            │
    │   └── > 4096 bytes   → cut off at 4096, body truncated              │
    └─────────────────────────────────────────────────────────────────────┘

Content-Length is never consulted when reading. Small requests from
ordinary clients come in one segment, which is what this relies on.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

There is no keep-alive. After the response is written the connection is
closed, whether or not the client asked for "Connection: keep-alive".

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, used in debug logs."""
    NEW = "new"              # Just accepted
    READING = "reading"      # Waiting in recv()
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Shutdown sequence
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

        with Connection(sock, addr, buffer_size=4096) as conn:
            data = conn.read_request()
            if data:
                conn.send_response(response.to_bytes())
        # closed here, even if something raised

    Socket errors never escape this class. Reads return None and writes
    return False, each with a log line, so one broken client cannot
    disturb any other connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 4096
    timeout: Optional[float] = None

    def __post_init__(self):
        # Accepted sockets inherit nothing useful from the listener's timeout
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read the request with a single recv().

        Returns:
            The bytes received (at most buffer_size), or None if the client
            closed without sending anything or the read failed.
        """
        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout:
            logger.warning(f"[{self.id}] Read timed out from {self.client_ip}")
            return None
        except OSError as e:
            logger.warning(f"[{self.id}] Read failed from {self.client_ip}: {e}")
            return None

        if not data:
            logger.debug(f"[{self.id}] Client closed before sending a request")
            return None

        logger.debug(f"[{self.id}] Read {len(data)} bytes")
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes with sendall().

        Returns:
            True if everything was sent, False if the connection was lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    TCP Close Sequence                            │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   Server                              Client                     │
        │      │   FIN ──────────────────────────► │  (shutdown SHUT_WR)  │
        │      │ ◄───────────────────────── FIN   │  (client closes)      │
        │      │   drain, then close()             │                       │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Draining unread input (a body past buffer_size, for instance)
        before close() keeps the kernel from answering with RST, which
        could discard the response before the client reads it.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure the connection is closed."""
        self.close()
        return False
