"""
Page discovery, path safety checks and URL construction for served pages.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from capture.constants import HTML_SUFFIX


class UnsafePagePathError(ValueError):
    """Raised when a page path is absolute or escapes the content root."""


def discover_html_pages(root: Path) -> list[str]:
    """
    Return every .html file under root as a sorted relative POSIX path.

    Hidden files and anything under a hidden directory are skipped.
    """
    pages = []
    for path in root.rglob(f"*{HTML_SUFFIX}"):
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if not path.is_file():
            continue
        pages.append(relative.as_posix())
    return sorted(pages)


def validate_page_path(page_path: str) -> str:
    """
    Reject absolute paths and parent-directory segments.

    Returns the path normalized to forward slashes.
    """
    normalized = page_path.replace("\\", "/")
    if os.path.isabs(page_path) or PurePosixPath(normalized).is_absolute():
        raise UnsafePagePathError(
            f"Invalid file path detected (security restriction): {page_path}"
        )
    if ".." in PurePosixPath(normalized).parts:
        raise UnsafePagePathError(
            f"Invalid file path detected (security restriction): {page_path}"
        )
    return normalized


def build_page_url(base_url: str, page_path: str) -> str:
    """Join base_url with page_path, percent-encoding each segment on its own."""
    encoded = "/".join(quote(segment, safe="") for segment in page_path.split("/"))
    return f"{base_url.rstrip('/')}/{encoded}"
