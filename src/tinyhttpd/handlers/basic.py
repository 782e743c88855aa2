"""
Handlers that answer from the request alone, without touching disk.

    GET /                 →  200, Content-Length: 0
    GET /echo/<text>      →  200 text/plain, body = <text> as sent
    GET /user-agent       →  200 text/plain, body = User-Agent value
                             400 if the header is missing
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, text, bad_request


def root(request: HTTPRequest) -> HTTPResponse:
    """Liveness probe. Headers and body of the request are ignored."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Reflect the rest of the path.

    The operand is not URL-decoded, so `/echo/a%20b` answers `a%20b`.
    """
    return text(request.path_params.get("text", ""))


def user_agent(request: HTTPRequest) -> HTTPResponse:
    # Case-sensitive: a "user-agent: x" line does not count
    value = request.user_agent
    if value is None:
        return bad_request()
    return text(value)
