"""Content types for binary uploads, chosen from the file name suffix only."""

from __future__ import annotations

from pathlib import Path

OCTET_STREAM = "application/octet-stream"

_CONTENT_TYPES: dict[str, str] = {
    ".xml": "application/xml",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}


def content_type_for(path: str | Path) -> str:
    return _CONTENT_TYPES.get(Path(path).suffix.lower(), OCTET_STREAM)
