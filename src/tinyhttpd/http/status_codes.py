"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed set of status codes this server ever sends.

=============================================================================
WHY A CLOSED SET?
=============================================================================

Every response comes from one of a handful of handlers, and each of them
can only succeed, report a client mistake, report a missing resource, or
report a filesystem failure:

    ┌────────┬──────────────────────────┬──────────────────────────────────┐
    │  Code  │  Phrase                  │  Sent when                       │
    ├────────┼──────────────────────────┼──────────────────────────────────┤
    │  200   │  OK                      │  root, echo, user-agent, file GET│
    │  201   │  Created                 │  file POST stored the body       │
    │  400   │  Bad Request             │  bad request line, no User-Agent │
    │  404   │  Not Found               │  no route, file cannot be opened │
    │  500   │  Internal Server Error   │  file read/write failed          │
    └────────┴──────────────────────────┴──────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Members compare equal to their integer code:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # Request handled, body (if any) follows
    CREATED = 201                   # File stored by POST
    BAD_REQUEST = 400               # Malformed request line / missing header
    NOT_FOUND = 404                 # Unmatched route or unopenable file
    INTERNAL_SERVER_ERROR = 500     # Filesystem failure inside a handler

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_server_error(self) -> bool:
        """Check if this is a 5xx status code."""
        return 500 <= self < 600


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
