"""
=============================================================================
HTTP REQUEST FRAMING AND PARSING
=============================================================================

Turns a fragmented TCP byte stream into exactly one HTTPRequest.

=============================================================================
WHAT WE ACCEPT ON THE WIRE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       ACCEPTED REQUEST SHAPE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /files/note.txt HTTP/1.1\r\n        ← request line            │
    │   ──┬─ ───────┬─────── ────┬───                                      │
    │   Method     Path       Version                                      │
    │                                                                      │
    │   Host: localhost:4221\r\n                 ← header lines, kept      │
    │   Content-Length: 5\r\n                      as raw "Name: Value"    │
    │   \r\n                                     ← header terminator       │
    │   hello                                    ← exactly 5 body bytes    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Only Content-Length frames the body. There is no chunked encoding and no
keep-alive: one request is read, one response is written, then the
connection is closed whatever the client asked for.

=============================================================================
FRAMER STATE MACHINE
=============================================================================

    AWAITING_HEADERS ──(\r\n\r\n found)──► HEADERS_COMPLETE
         │                                        │
         │ EOF                     parse request line + headers
         ▼                                        │
       FAILED                                     ▼
    (no response)                          AWAITING_BODY ──(len >= N or EOF)──► COMPLETE

    - AWAITING_HEADERS: bytes accumulate until the terminator shows up.
      The search resumes 3 bytes before the previous end of the buffer,
      so a terminator split across two recv() calls is still found.
    - HEADERS_COMPLETE: transient. The header section is decoded only
      now, once it is whole, so a multi-byte UTF-8 character split across
      chunks cannot garble a header. A request line without two spaces
      raises MalformedRequestError (answered with 400).
    - AWAITING_BODY: the body is raw bytes and is never decoded. The
      header terminator is not searched for again.
    - COMPLETE: body truncated to exactly Content-Length. A peer that
      closes early leaves a short body, which is accepted as-is.

=============================================================================
HEADERS ARE A LIST, NOT A DICT
=============================================================================

Lines end at "\n" (a "\r" just before it is dropped). Header lines are
stored exactly as received otherwise, in order, duplicates kept:

    ["Host: localhost:4221", "User-Agent: curl/8.0", "Accept: */*"]

Lookups are linear, case-sensitive prefix scans ("User-Agent: ",
"Content-Length: "). A client sending "content-length: 5" has sent no
Content-Length at all as far as this server is concerned.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


logger = logging.getLogger(__name__)


HEADER_TERMINATOR = b"\r\n\r\n"
CONTENT_LENGTH_PREFIX = "Content-Length: "


# =============================================================================
# ERRORS
# =============================================================================

class HTTPParseError(Exception):
    """
    Raised when a framed request cannot be parsed.

    Carries the HTTP status the connection should be answered with.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code  # HTTP status to return


class MalformedRequestError(HTTPParseError):
    """The request line is missing one of its two space separators."""


class IncompleteRequestError(ConnectionError):
    """
    The peer closed the stream before the header terminator arrived.

    This is an I/O-level failure, not a parse error: nothing is sent back,
    the connection is simply closed.
    """


# =============================================================================
# REQUEST
# =============================================================================

@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         Text before the first space of the request line.
        path:           Text between the first and second space, raw and
                        never URL-decoded ("/echo/a%20b" stays as is).
        version:        Text after the second space ("HTTP/1.1").
        headers:        Raw "Name: Value" lines in arrival order.
        body:           Body bytes, at most Content-Length of them.
        path_params:    Operands extracted by the router.
        client_address: (ip, port) of the peer, for logging.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: List[str] = field(default_factory=list)
    body: bytes = b""

    # Router-injected parameters
    path_params: Dict[str, str] = field(default_factory=dict)

    client_address: tuple[str, int] = ("", 0)

    @property
    def request_line(self) -> str:
        """The request line as it would appear on the wire."""
        return f"{self.method} {self.path} {self.version}"

    @property
    def user_agent(self) -> Optional[str]:
        """Value of the first User-Agent line, if any."""
        return self.get_header("User-Agent")

    def find_header(self, prefix: str) -> Optional[str]:
        """
        Linear scan for the first header line starting with `prefix`.

        Returns the rest of that line, or None.

        Example:
            request.find_header("User-Agent: ")  # "curl/8.0"
        """
        return find_header(self.headers, prefix)

    def get_header(self, name: str) -> Optional[str]:
        """Case-sensitive lookup of a header by exact name."""
        return self.find_header(f"{name}: ")


def find_header(headers: List[str], prefix: str) -> Optional[str]:
    """Return the remainder of the first line in `headers` starting with `prefix`."""
    for line in headers:
        if line.startswith(prefix):
            return line[len(prefix):]
    return None


def parse_content_length(headers: List[str]) -> int:
    """
    Find "Content-Length: N" among raw header lines.

    N must be ASCII digits, optionally after a single "+". Anything else
    ("-1", "5 ", "abc", "+", a missing header) means a zero-length body.
    """
    value = find_header(headers, CONTENT_LENGTH_PREFIX)
    if value is None:
        return 0
    digits = value[1:] if value.startswith("+") else value
    if not (digits.isascii() and digits.isdigit()):
        logger.debug(f"Ignoring unparsable Content-Length: {value!r}")
        return 0
    return int(digits)


def parse_request_line(line: str) -> tuple[str, str, str]:
    """
    Split a request line into (method, path, version).

        "GET /echo/a b HTTP/1.1"  →  ("GET", "/echo/a", "b HTTP/1.1")

    Only the first two spaces matter, exactly as a client would frame it.

    Raises:
        MalformedRequestError: If either space is missing.
    """
    first = line.find(" ")
    if first == -1:
        raise MalformedRequestError(f"Malformed request line: {line!r}")

    second = line.find(" ", first + 1)
    if second == -1:
        raise MalformedRequestError(f"Malformed request line: {line!r}")

    return line[:first], line[first + 1:second], line[second + 1:]


# =============================================================================
# FRAMER
# =============================================================================

class FramerState(Enum):
    """Where the framer is in reading one request."""
    AWAITING_HEADERS = "awaiting_headers"   # No terminator seen yet
    HEADERS_COMPLETE = "headers_complete"   # Terminator seen, head being parsed
    AWAITING_BODY = "awaiting_body"         # Need more body bytes
    COMPLETE = "complete"                   # Request ready for build()
    FAILED = "failed"                       # EOF before the terminator


class RequestFramer:
    """
    Incremental request framer.

    Feed it whatever recv() returned, in order, and tell it when the
    stream ended. It never blocks and never touches a socket, so it can be
    driven by a real connection or by a test feeding one byte at a time.

    Usage:
        framer = RequestFramer()
        while framer.state is not FramerState.COMPLETE:
            chunk = sock.recv(1024)
            if not chunk:
                framer.finish()   # raises IncompleteRequestError if no head
                break
            framer.feed(chunk)
        request = framer.build()
    """

    def __init__(self, client_address: tuple[str, int] = ("", 0)):
        self.client_address = client_address
        self.state = FramerState.AWAITING_HEADERS

        self._buffer = bytearray()   # Header bytes until the terminator
        self._scan_from = 0          # Where the next terminator search starts
        self._body = bytearray()

        self.method: Optional[str] = None
        self.path: Optional[str] = None
        self.version: Optional[str] = None
        self.headers: List[str] = []
        self.content_length = 0

    @property
    def is_complete(self) -> bool:
        return self.state is FramerState.COMPLETE

    def feed(self, data: bytes) -> FramerState:
        """
        Consume the next chunk of the stream.

        Bytes arriving after the request is complete are ignored; there is
        no pipelining.

        Returns:
            The state after consuming `data`.

        Raises:
            MalformedRequestError: If the request line cannot be split.
            RuntimeError: If called after the framer failed.
        """
        if self.state is FramerState.FAILED:
            raise RuntimeError("Cannot feed a failed framer")

        if self.state is FramerState.AWAITING_HEADERS:
            self._buffer += data

            header_end = self._buffer.find(HEADER_TERMINATOR, self._scan_from)
            if header_end == -1:
                # Terminator may straddle this chunk and the next one
                self._scan_from = max(0, len(self._buffer) - len(HEADER_TERMINATOR) + 1)
                return self.state

            self.state = FramerState.HEADERS_COMPLETE
            head = bytes(self._buffer[:header_end])
            rest = bytes(self._buffer[header_end + len(HEADER_TERMINATOR):])
            self._buffer.clear()

            self._parse_head(head)

            self.state = FramerState.AWAITING_BODY
            self._append_body(rest)

        elif self.state is FramerState.AWAITING_BODY:
            self._append_body(data)

        return self.state

    def finish(self) -> FramerState:
        """
        Signal that the peer closed the stream.

        Returns:
            COMPLETE (possibly with a short body).

        Raises:
            IncompleteRequestError: If the header terminator never arrived.
        """
        if self.state is FramerState.AWAITING_HEADERS:
            self.state = FramerState.FAILED
            raise IncompleteRequestError("Incomplete header")

        if self.state is FramerState.AWAITING_BODY:
            logger.debug(
                f"Stream closed with {len(self._body)} of "
                f"{self.content_length} body bytes, accepting short body"
            )
            self.state = FramerState.COMPLETE

        return self.state

    def build(self) -> HTTPRequest:
        """Return the framed request. Only valid once COMPLETE."""
        if self.state is not FramerState.COMPLETE:
            raise RuntimeError(f"Request not complete (state: {self.state.value})")

        return HTTPRequest(
            method=self.method,
            path=self.path,
            version=self.version,
            headers=list(self.headers),
            body=bytes(self._body),
            client_address=self.client_address,
        )

    def _parse_head(self, head: bytes) -> None:
        """Parse the request line and header lines of a complete head."""
        # Decoding is safe now: the whole head is here, no split characters
        text = head.decode("utf-8", errors="replace")

        # A bare "\n" also ends a line; one trailing "\r" is dropped from each
        lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]

        self.method, self.path, self.version = parse_request_line(lines[0])
        self.headers = lines[1:]
        self.content_length = parse_content_length(self.headers)

    def _append_body(self, data: bytes) -> None:
        self._body += data
        if len(self._body) >= self.content_length:
            del self._body[self.content_length:]
            self.state = FramerState.COMPLETE


def parse_request(data: bytes, client_address: tuple[str, int] = ("", 0)) -> HTTPRequest:
    """
    Frame a request that is already fully in memory.

    `data` is treated as the entire stream: a missing terminator raises
    IncompleteRequestError and a short body is accepted.
    """
    framer = RequestFramer(client_address)
    framer.feed(data)
    framer.finish()
    return framer.build()
