"""
=============================================================================
REQUEST HANDLERS
=============================================================================

A handler is any callable taking an HTTPRequest and returning an
HTTPResponse. Operands matched by the router are in request.path_params.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  basic.root             /                 200, empty                 │
    │  basic.echo             /echo/*text       200, text/plain            │
    │  basic.user_agent       /user-agent       200 text/plain, or 400     │
    │  FileHandler.store      POST /files/:name 201, or 500                │
    │  FileHandler.retrieve   /files/:name      200, or 404 / 500          │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .basic import root, echo, user_agent
from .files import FileHandler

__all__ = [
    "root",
    "echo",
    "user_agent",
    "FileHandler",
]
