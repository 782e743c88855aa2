"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Creates the TCP listening socket, binds, listens                 │
    │  • Runs the accept() loop on the calling thread                     │
    │  • Stops on shutdown(), SIGINT or SIGTERM                           │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One Connection per accepted socket,
                                    │ handed to a new daemon thread
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Feeds recv() chunks to a RequestFramer until one request is done │
    │  • Writes the response with sendall()                               │
    │  • Closes: SHUT_WR, drain, close                                    │
    └─────────────────────────────────────────────────────────────────────┘

There is no worker pool and no queue. Each connection gets its own
thread for its whole (short) life; threads share nothing but the
serving directory on disk.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # TCP listener and accept loop
    "Connection",       # One client socket, one request, one response
    "ConnectionState",  # Connection lifecycle states
]
