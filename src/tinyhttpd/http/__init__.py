"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

Translates raw bytes from TCP into requests and responses back into bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST FRAMER (request.py)                                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   b"GET /echo/hi HTTP/1.1\r\nHost: ...\r\n\r\n" in chunks    │
    │ Output:  HTTPRequest(method="GET", path="/echo/hi", ...)            │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   GET /files/note.txt                                        │
    │ Output:  calls retrieve(request) with path_params={"name": ...}     │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE SERIALIZER (response.py)                                   │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   text("hi")                                                 │
    │ Output:  b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n          │
    │            Content-Length: 2\r\n\r\nhi"                             │
    └─────────────────────────────────────────────────────────────────────┘

Plus STATUS CODES (status_codes.py) and MIME TYPES (mime_types.py).

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestFramer,
    FramerState,
    HTTPParseError,
    MalformedRequestError,
    IncompleteRequestError,
    parse_request,
)
from .response import (
    HTTPResponse,
    ok,              # 200 OK
    text,            # 200 OK, text/plain
    created,         # 201 Created
    bad_request,     # 400 Bad Request
    not_found,       # 404 Not Found
    internal_error,  # 500 Internal Server Error
    error_response,
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus
from .mime_types import get_mime_type

__all__ = [
    # Request framing
    "HTTPRequest",
    "RequestFramer",
    "FramerState",
    "HTTPParseError",
    "MalformedRequestError",
    "IncompleteRequestError",
    "parse_request",

    # Responses
    "HTTPResponse",
    "ok",
    "text",
    "created",
    "bad_request",
    "not_found",
    "internal_error",
    "error_response",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
]
