"""
=============================================================================
URL ROUTER
=============================================================================

Ordered, first-match dispatch of (method, path) to a handler.

=============================================================================
ROUTE PATTERNS
=============================================================================

1. STATIC PATHS: exact string match

   Pattern: /user-agent
   Matches: /user-agent
   Doesn't match: /user-agent/, /user-agents

2. PARAMETERS (:param): exactly one non-empty path segment

   Pattern: /files/:name
   Matches: /files/note.txt  → {"name": "note.txt"}
   Doesn't match: /files/, /files/a/b

3. WILDCARD (*param): the rest of the path, slashes included, may be empty

   Pattern: /echo/*text
   Matches: /echo/hello    → {"text": "hello"}
            /echo/foo/bar  → {"text": "foo/bar"}
            /echo/         → {"text": ""}

The path is matched exactly as it arrived: no trailing-slash stripping,
no percent-decoding, no query-string splitting.

=============================================================================
MATCHING ORDER
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   #   Method   Pattern          Handler                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │   1   ANY      /                root probe                           │
    │   2   GET      /echo/*text      echo                                 │
    │   3   ANY      /user-agent      user-agent reflection                │
    │   4   POST     /files/:name     store file                           │
    │   5   ANY      /files/:name     retrieve file                        │
    │   -   -        (no match)       404 Not Found                        │
    └─────────────────────────────────────────────────────────────────────┘

Routes are tried in registration order and the first whose method and
pattern both match wins. A method mismatch is not an error of its own:
the request simply keeps falling through, so `POST /echo/x` ends at 404.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, List
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


# Handler: takes a request, returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        Route(
            path="/files/:name",     # URL pattern
            method="POST",           # None = any method
            handler=store_file,
            name="store_file",
        )
    """

    path: str                        # URL pattern (e.g., /files/:name)
    method: Optional[str]            # HTTP method (None = any method)
    handler: Handler                 # Handler function to call
    name: Optional[str] = None       # Route name, used in logs

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """Result of a successful match: the route and its operands."""
    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router.

    Routes are registered with decorators:

        router = Router()

        @router.get("/echo/*text")
        def echo(request):
            return text(request.path_params["text"])

        @router.route("/")
        def root(request):
            return ok()
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        name: Optional[str] = None
    ) -> Route:
        """
        Register a route at the end of the match order.

        Args:
            path: URL pattern (e.g., /files/:name)
            handler: Function taking a request and returning a response
            method: HTTP method, or None to accept any method
            name: Optional route name

        Returns:
            The registered Route
        """
        pattern, param_names = self._compile_pattern(path)

        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            name=name or getattr(handler, "__name__", None),
            _pattern=pattern,
            _param_names=param_names,
        )

        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile a path pattern into an anchored regex.

            "/"              →  ^/$
            "/user-agent"    →  ^/user\\-agent$
            "/files/:name"   →  ^/files/(?P<name>[^/]+)$
            "/echo/*text"    →  ^/echo/(?P<text>.*)$

        A wildcard must be the last segment; anything after it is ignored.
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            regex_parts.append("/")

            if segment.startswith(":"):
                param_name = segment[1:]
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>[^/]+)")

            elif segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>.*)")
                break  # Wildcard consumes everything

            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            regex_parts.append("/")  # The root pattern itself

        regex_parts.append("$")
        return re.compile("".join(regex_parts), re.DOTALL), param_names

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Returns:
            RouteMatch if found, None otherwise
        """
        for route in self._routes:
            if route.method and route.method != method:
                continue

            match = route._pattern.match(path)
            if match:
                return RouteMatch(route=route, params=match.groupdict())

        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        The matched operands are injected as request.path_params before the
        handler runs. Unmatched requests get an empty 404.
        """
        match = self.match(request.method, request.path)

        if match is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found()

        request.path_params = match.params
        return match.route.handler(request)

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(
        self,
        path: str,
        method: Optional[str] = None,
        name: Optional[str] = None
    ) -> Callable[[Handler], Handler]:
        """Decorator registering a route; method=None accepts any method."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET", name)

    def post(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST", name)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def routes(self) -> List[Route]:
        """All registered routes, in match order."""
        return list(self._routes)

    def log_routes(self) -> None:
        """Log the route table at debug level."""
        for route in self._routes:
            logger.debug(f"  {route.method or 'ANY':8} {route.path} → {route.name}")
