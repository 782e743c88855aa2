"""
=============================================================================
FILE HANDLER
=============================================================================

GET and POST of /files/<name> against the serving directory.

=============================================================================
FLOW
=============================================================================

    GET /files/note.txt                    POST /files/note.txt
        │                                       │
        ▼                                       ▼
    open(<dir>/note.txt, "rb")             open(<dir>/note.txt, "wb")
        │                                       │ (create or truncate)
        ├── fails    → 404 Not Found            ├── fails    → 500
        │                                       │
        ▼                                       ▼
    read()                                 write(request.body)
        │                                       │
        ├── fails    → 500                      ├── fails    → 500
        │                                       │
        ▼                                       ▼
    200 OK, Content-Type by extension      201 Created, empty body
    body = file bytes, untouched

=============================================================================
PATH RULES
=============================================================================

The router only matches a single, non-empty path segment as <name>, so a
name never contains "/". Nothing else is checked: "." and ".." reach the
handler and fail when opened as a file (they are directories). Names are
used exactly as they appeared in the request line, without URL-decoding.

The serving directory itself is trusted as configured and is not created.

=============================================================================
"""

import logging
from pathlib import Path

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, created, not_found, internal_error
from ..http.mime_types import get_mime_type


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Serves and stores files in one directory.

    Usage:
        files = FileHandler("/tmp/data")

        router.post("/files/:name")(files.store)
        router.route("/files/:name")(files.retrieve)
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        """Filesystem path for a file name taken from the URL."""
        return self.directory / name

    def retrieve(self, request: HTTPRequest) -> HTTPResponse:
        """Return the file's bytes, typed by its extension."""
        name = request.path_params["name"]
        path = self.path_for(name)

        try:
            f = open(path, "rb")
        except OSError as e:
            logger.info(f"Cannot open {path}: {e}")
            return not_found()

        with f:
            try:
                content = f.read()
            except OSError as e:
                logger.error(f"Error reading {path}: {e}")
                return internal_error()

        return ok(content, get_mime_type(name))

    def store(self, request: HTTPRequest) -> HTTPResponse:
        """Write the request body verbatim, replacing any existing file."""
        name = request.path_params["name"]
        path = self.path_for(name)

        try:
            with open(path, "wb") as f:
                f.write(request.body)
        except OSError as e:
            logger.error(f"Error writing {path}: {e}")
            return internal_error()

        logger.info(f"Saved {len(request.body)} bytes to {path}")
        return created()
