"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps file extensions to the Content-Type sent with `GET /files/<name>`.

The lookup is keyed only by the extension of the requested name. The file
contents are never sniffed, so `notes.txt` is `text/plain` even if it holds
a PNG, and a name without a known extension is sent as opaque bytes:

    note.txt      →  text/plain
    photo.JPG     →  image/jpeg        (extension is case-insensitive)
    archive.tar   →  application/x-tar
    README        →  application/octet-stream
    data.unknown  →  application/octet-stream

No charset parameter is appended. Stored files are raw bytes uploaded by
clients and the server has no idea which encoding they use.

=============================================================================
"""

from pathlib import Path
from typing import Optional


MIME_TYPES = {
    # Text
    ".txt": "text/plain",
    ".text": "text/plain",
    ".log": "text/plain",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".csv": "text/csv",
    ".md": "text/markdown",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".yaml": "application/yaml",
    ".yml": "application/yaml",
    ".toml": "application/toml",

    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".bmp": "image/bmp",

    # Audio / video
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".mp4": "video/mp4",
    ".webm": "video/webm",

    # Documents and archives
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".tar": "application/x-tar",
    ".gz": "application/gzip",
    ".7z": "application/x-7z-compressed",
    ".wasm": "application/wasm",
}

# Anything we cannot name is served as opaque bytes
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str | Path, default: Optional[str] = None) -> str:
    """
    Get the MIME type for a file based on its extension.

    Args:
        path: File path or bare file name.
        default: Returned for unknown extensions instead of
                 application/octet-stream.

    Returns:
        The MIME type string.

    Examples:
        >>> get_mime_type("note.txt")
        'text/plain'
        >>> get_mime_type("/srv/files/blob")
        'application/octet-stream'
    """
    if isinstance(path, str):
        path = Path(path)

    extension = path.suffix.lower()  # .PNG → .png
    return MIME_TYPES.get(extension, default or DEFAULT_MIME_TYPE)
