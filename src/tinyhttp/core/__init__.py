"""
=============================================================================
CORE NETWORKING
=============================================================================

The socket-level half of the server. Nothing in here knows HTTP.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer        listen, accept loop, signal handling          │
    │        │                                                             │
    │        ▼ Connection(client_socket, addr)                             │
    │   ThreadPool          one task per connection                        │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection          single recv(), sendall(), graceful close      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",     # Listener and accept loop
    "Connection",       # Client socket wrapper
    "ConnectionState",  # Connection lifecycle states
    "ThreadPool",       # Worker threads
]
