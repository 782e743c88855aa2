"""
=============================================================================
HTTP RESPONSE SERIALIZATION
=============================================================================

Builds the bytes written back on the socket.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        RESPONSE STRUCTURE                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   HTTP/1.1 200 OK                       ← status line                │
    │   \r\nContent-Type: text/plain          ← only if content_type set   │
    │   \r\nContent-Length: 5                 ← only if content_length set │
    │   \r\n\r\n                              ← end of head                │
    │   hello                                 ← body bytes, untouched      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Exactly two optional headers exist, always in this order. No Date, no
Server, no Connection header: the connection is closed after every
response anyway.

The body is concatenated as raw bytes after the head. It is never decoded
or re-encoded, which is what keeps binary file downloads intact.

=============================================================================
INVARIANTS
=============================================================================

    body present          →  content_length == len(body)
                             (filled in automatically when omitted)
    content_length > 0    →  body present

HTTPResponse enforces both on construction and raises ValueError otherwise.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional, Union

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    An HTTP response to be written to the client.

    Use the convenience functions at the bottom of this module for the
    common shapes:

        ok()                         200, Content-Length: 0
        ok("hello", "text/plain")    200 with a body
        created()                    201, Content-Length: 0
        not_found()                  404, Content-Length: 0
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    body: Optional[bytes] = None
    version: str = "HTTP/1.1"

    def __post_init__(self):
        if self.body is not None:
            if self.content_length is None:
                self.content_length = len(self.body)
            elif self.content_length != len(self.body):
                raise ValueError(
                    f"Content-Length {self.content_length} does not match "
                    f"body of {len(self.body)} bytes"
                )
        elif self.content_length:
            raise ValueError(f"Content-Length {self.content_length} without a body")

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {self.status.value} {self.status.phrase}"

    def head_bytes(self) -> bytes:
        """Status line and headers, up to and including the blank line."""
        head = self.status_line

        if self.content_type is not None:
            head += f"\r\nContent-Type: {self.content_type}"

        if self.content_length is not None:
            head += f"\r\nContent-Length: {self.content_length}"

        head += "\r\n\r\n"
        return head.encode("utf-8")

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Returns:
            Head bytes followed by the raw body bytes (if any).
        """
        if self.body is None:
            return self.head_bytes()
        return self.head_bytes() + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: Union[str, bytes, None] = None, content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    Without a body the response still carries Content-Length: 0.
    Strings are encoded as UTF-8.
    """
    if body is None:
        return HTTPResponse(HTTPStatus.OK, content_length=0)

    if isinstance(body, str):
        body = body.encode("utf-8")

    return HTTPResponse(HTTPStatus.OK, content_type=content_type, body=body)


def text(body: str) -> HTTPResponse:
    """Create a 200 OK text/plain response."""
    return ok(body, "text/plain")


def created() -> HTTPResponse:
    """Create an empty 201 Created response."""
    return HTTPResponse(HTTPStatus.CREATED, content_length=0)


def bad_request() -> HTTPResponse:
    """Create an empty 400 Bad Request response."""
    return HTTPResponse(HTTPStatus.BAD_REQUEST, content_length=0)


def not_found() -> HTTPResponse:
    """Create an empty 404 Not Found response."""
    return HTTPResponse(HTTPStatus.NOT_FOUND, content_length=0)


def internal_error() -> HTTPResponse:
    """Create an empty 500 Internal Server Error response."""
    return HTTPResponse(HTTPStatus.INTERNAL_SERVER_ERROR, content_length=0)


def error_response(status: int) -> HTTPResponse:
    """Create an empty response for any of the supported error statuses."""
    return HTTPResponse(HTTPStatus(status), content_length=0)
