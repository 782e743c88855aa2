"""
=============================================================================
TINYHTTPD
=============================================================================

A minimal HTTP/1.1 server over raw TCP sockets.

    GET  /                 200, empty body
    GET  /echo/<text>      200 text/plain, body <text>
    GET  /user-agent       200 text/plain, body = User-Agent header
    GET  /files/<name>     200 with the file's bytes, or 404
    POST /files/<name>     201 after writing the request body to <name>

Requests are framed directly from the byte stream using the blank-line
header terminator and Content-Length. One request per connection, one
thread per connection, no keep-alive, no chunked encoding.

=============================================================================
QUICK START
=============================================================================

    from tinyhttpd import ServerConfig, create_app

    app = create_app(ServerConfig(directory="/tmp/files"))
    app.run()

or from a shell:

    python -m tinyhttpd --directory /tmp/files

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
