"""Lookup of page assets under the UI directory, and their HTTP content types."""

from __future__ import annotations

import mimetypes
from pathlib import Path, PurePosixPath
from typing import Optional

# Types the routine page is built from; anything else goes through mimetypes.
_PAGE_ASSET_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".svg": "image/svg+xml",
    ".wav": "audio/wav",
}
_BINARY_FALLBACK = "application/octet-stream"


def resolve_static_file(ui_root: Path, request_path: str) -> Optional[Path]:
    """Map a URL path to an existing file under `ui_root`.

    Returns None for the bare root, hidden files or directories, paths that
    escape the UI directory, and anything that is not a regular file.
    """
    parts = PurePosixPath("/" + (request_path or "")).parts[1:]
    if not parts or any(part.startswith(".") for part in parts):
        return None

    root = ui_root.resolve()
    candidate = root.joinpath(*parts).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


def guess_content_type(path: Path) -> str:
    """Content type for an asset; textual types carry a UTF-8 charset."""
    suffix = path.suffix.lower()
    mime_type = _PAGE_ASSET_TYPES.get(suffix) or mimetypes.guess_type(path.name)[0]
    if not mime_type:
        return _BINARY_FALLBACK
    if mime_type.startswith("text/") or mime_type in ("application/json", "image/svg+xml"):
        return f"{mime_type}; charset=utf-8"
    return mime_type
