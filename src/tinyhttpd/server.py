"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: socket server, one thread per connection,
request framing, middleware, router and response serialization.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   threading.Thread(_process_connection, daemon=True)                 │
    │        │                                                             │
    │        ▼                                                             │
    │   conn.read_request()  ──────────────┬───────────────────────────┐   │
    │        │                             │                           │   │
    │        │                 HTTPParseError                  OSError │   │
    │        │                 (bad request line)   (EOF before head,  │   │
    │        │                             │         reset, timeout)   │   │
    │        ▼                             ▼                           ▼   │
    │   middleware → router → handler   400, empty body        no response │
    │        │                             │                           │   │
    │        │ exception → 500             │                           │   │
    │        ▼                             │                           │   │
    │   conn.send_response(to_bytes())  ◄──┘                           │   │
    │        │                                                         │   │
    │        ▼                                                         │   │
    │   conn.close()  ◄────────────────────────────────────────────────┘   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every connection carries exactly one request. Nothing is shared between
connection threads except the serving directory on disk.

=============================================================================
"""

import logging
import threading
from typing import Optional, Callable

from .config import ServerConfig
from .core import SocketServer, Connection
from .http import (
    HTTPRequest, HTTPParseError, IncompleteRequestError,
    HTTPResponse, Router,
    error_response, internal_error,
)
from .handlers import FileHandler, root, echo, user_agent
from .middleware import MiddlewarePipeline, Middleware


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Minimal HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(directory="/tmp/files"))

        @server.get("/echo/*text")
        def echo(request):
            return text(request.path_params["text"])

        server.use(LoggingMiddleware())
        server.run()

    Most callers want create_app(), which registers the standard routes.

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._router = Router()
        self._middleware = MiddlewarePipeline()

        # Built on first use, once all middleware is registered
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware. Executed in the order added.

        Returns:
            Self for method chaining.
        """
        self._middleware.add(middleware)
        self._handler = None
        return self

    @property
    def router(self) -> Router:
        return self._router

    def route(self, path: str, method: Optional[str] = None, **kwargs):
        """Register a route handler; method=None accepts any method."""
        return self._router.route(path, method, **kwargs)

    def get(self, path: str, **kwargs):
        """Register a GET route."""
        return self._router.get(path, **kwargs)

    def post(self, path: str, **kwargs):
        """Register a POST route."""
        return self._router.post(path, **kwargs)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server. Blocks until shutdown() or SIGINT/SIGTERM.

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            OSError: If the address cannot be bound.
        """
        if host:
            self.config.host = host
        if port:
            self.config.port = port

        self._setup_logging()

        logger.info(
            f"Starting {self.config.server_name} on "
            f"{self.config.host}:{self.config.port}, "
            f"serving files from {self.config.directory}"
        )
        self._router.log_routes()

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

        logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up (for tests and embedders)."""
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_for_shutdown(timeout)

    def _setup_logging(self):
        """Configure root logging once from config.log_level."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("tinyhttpd").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a freshly accepted connection to its own thread.

        Called on the accept loop's thread, so it must return quickly.
        """
        logger.info(f"[{conn.id}] Accepted connection from {conn.client_ip}:{conn.client_port}")

        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """
        Read one request, answer it, close the connection.

        Runs on the connection's own thread. Nothing raised here escapes
        the thread: every failure ends in a log line and a closed socket.
        """
        with conn:
            try:
                request = conn.read_request()
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Bad request: {e}")
                response = error_response(e.status_code)
                if conn.send_response(response.to_bytes()):
                    logger.info(f"[{conn.id}] Sent {response.status_line}")
                return
            except IncompleteRequestError as e:
                logger.warning(f"[{conn.id}] {e}, closing without response")
                return
            except OSError as e:
                logger.error(f"[{conn.id}] Read error: {e}")
                return

            logger.info(f"[{conn.id}] {request.request_line}")

            response = self.handle_request(request)

            if conn.send_response(response.to_bytes()):
                level = logging.WARNING if response.status.is_server_error else logging.INFO
                logger.log(level, f"[{conn.id}] Sent {response.status_line}")

    def handle_request(self, request: HTTPRequest) -> HTTPResponse:
        """
        Run a framed request through middleware and router.

        An exception escaping a handler is logged with its traceback and
        turned into an empty 500.
        """
        if self._handler is None:
            self._handler = self._middleware.wrap(self._router.handle)

        try:
            return self._handler(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            return internal_error()


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server with the standard routes registered, in match order:

        ANY   /              root probe
        GET   /echo/*text    echo
        ANY   /user-agent    User-Agent reflection
        POST  /files/:name   store file
        ANY   /files/:name   retrieve file

    Example:
        app = create_app(ServerConfig(directory="/tmp/files"))
        app.use(LoggingMiddleware())
        app.run()
    """
    app = HTTPServer(config)
    files = FileHandler(app.config.directory)

    app.route("/")(root)
    app.get("/echo/*text")(echo)
    app.route("/user-agent")(user_agent)
    app.post("/files/:name", name="store_file")(files.store)
    app.route("/files/:name", name="retrieve_file")(files.retrieve)

    return app
