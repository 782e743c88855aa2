"""
=============================================================================
MIDDLEWARE BASE CLASSES
=============================================================================

Middleware runs between the framed request and the router:

    request ──► Middleware 1 ──► Middleware 2 ──► router.handle
                                                       │
    response ◄── Middleware 1 ◄── Middleware 2 ◄───────┘

Each middleware receives the request and a `next` callable, and decides
whether (and when) to call it.

=============================================================================
THE MIDDLEWARE CONTRACT
=============================================================================

    class MyMiddleware(Middleware):
        def __call__(self, request, next):
            # before: inspect the request
            response = next(request)
            # after: inspect the response
            return response

Responses here carry at most Content-Type and Content-Length, both
derived from the handler's body. Middleware observes; it does not add
headers.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# The signature of router.handle and of every wrapped layer
NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """Abstract base class for middleware."""

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming HTTP request
            next: The next handler in the chain

        Returns:
            HTTP response (from next() or short-circuited)
        """
        pass

    @property
    def name(self) -> str:
        """Middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

    The first middleware added is the outermost layer:

        pipeline = MiddlewarePipeline()
        pipeline.add(LoggingMiddleware())

        handler = pipeline.wrap(router.handle)
        response = handler(request)

    An empty pipeline returns the handler unchanged.
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """
        Append middleware (innermost so far).

        Returns:
            Self for method chaining
        """
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with every middleware in the pipeline.

        Given [MW1, MW2] the result calls MW1 → MW2 → handler, so the
        list is walked in reverse while wrapping.
        """
        current = handler

        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)

        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)
