"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: reads exactly one request from it,
writes exactly one response, then closes it.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP does NOT preserve message boundaries. A client that sends

    POST /files/a.txt HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello

in one write may have it arrive in any split:

    recv() → "POST /files/a.t"
    recv() → "xt HTTP/1.1\r\nContent-Length: 5\r\n\r"
    recv() → "\nhel"
    recv() → "lo"

Each chunk is handed to a RequestFramer, which knows where the header
terminator and the body end are. The connection itself only moves bytes.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING
     │             │                                    │
     │             ▼                                    │
     └──────────► CLOSING ◄─────────────────────────────┘
                    │
                    ▼
                  CLOSED

There is no keep-alive state: after one response the connection is
always closed, even if the client sent "Connection: keep-alive".

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.request import HTTPRequest, RequestFramer


logger = logging.getLogger(__name__)

# Upper bounds on discarding unread request bytes during close()
DRAIN_TIMEOUT = 0.5       # seconds, total
DRAIN_LIMIT = 64 * 1024   # bytes


class ConnectionState(Enum):
    """Connection lifecycle states, tracked for logging."""
    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Feeding recv() chunks to the framer
    PROCESSING = "processing"  # Request framed, handler is executing
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A single client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier used in log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        buffer_size: Maximum bytes per recv() call.
        timeout: Socket timeout in seconds, None to block indefinitely.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    timeout: Optional[float] = None

    def __post_init__(self):
        # Accepted sockets inherit the listener's accept-poll timeout
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> HTTPRequest:
        """
        Read one complete HTTP request from the socket.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    read_request() Flow                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   framer = RequestFramer()                                       │
        │       │                                                          │
        │   while not framer.is_complete:                                  │
        │       │                                                          │
        │       ├── chunk = recv(buffer_size)                              │
        │       │                                                          │
        │       ├── chunk == b""  →  framer.finish()   (peer closed)       │
        │       │                                                          │
        │       └── otherwise     →  framer.feed(chunk)                    │
        │                                                                  │
        │   return framer.build()                                          │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Returns:
            The framed request.

        Raises:
            IncompleteRequestError: Peer closed before the header terminator.
            MalformedRequestError: The request line could not be split.
            OSError: Any socket error (reset, timeout) while reading.
        """
        self.state = ConnectionState.READING
        framer = RequestFramer(self.address)

        while not framer.is_complete:
            chunk = self.socket.recv(self.buffer_size)
            if not chunk:
                framer.finish()
                break
            framer.feed(chunk)

        self.state = ConnectionState.PROCESSING
        return framer.build()

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        sendall() blocks until every byte is written or the socket fails.
        A failure is logged and not retried.

        Returns:
            True if the send succeeded, False if the connection was lost.
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
        │   1. shutdown(SHUT_WR)   FIN to the client: response is over     │
        │   2. drain recv()        discard unread request bytes, so the    │
        │                          kernel does not answer with RST and     │
        │                          clobber the response in flight          │
        │                          (at most DRAIN_TIMEOUT / DRAIN_LIMIT)   │
        │   3. close()             release the file descriptor             │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        # Stops at whichever limit is hit first
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows:

            with conn:
                request = conn.read_request()
                conn.send_response(response.to_bytes())
            # Connection closed here, even on error
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
