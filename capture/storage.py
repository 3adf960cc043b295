"""
Screenshot storage helpers for local disk output.

Naming convention: {output_root}/{page_dir}/{SanitizedDevice}_{page_stem}.png

Screenshots at the same path are overwritten deterministically between runs.
"""

from __future__ import annotations

import asyncio
import hashlib
import re
from pathlib import Path, PurePosixPath

from capture.constants import HTML_SUFFIX, SCREENSHOT_SUFFIX

_UNSAFE_DEVICE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def sanitize_device_name(device_name: str) -> str:
    """Keep only ASCII letters and digits ("iPhone 16 Pro" -> "iPhone16Pro")."""
    return _UNSAFE_DEVICE_CHARS.sub("", device_name)


def page_stem(page_path: str) -> str:
    """File name of page_path without a trailing .html extension."""
    name = PurePosixPath(page_path).name
    if name.endswith(HTML_SUFFIX) and name != HTML_SUFFIX:
        return name[: -len(HTML_SUFFIX)]
    return name


def build_screenshot_path(output_root: Path, page_path: str, device_name: str) -> Path:
    """
    Build the screenshot path for one (page, device) pair.

    "sub/dir/index.html" on "iPhone 16" -> {output_root}/sub/dir/iPhone16_index.png.
    Returns a Path object (does not create the file or directory).
    """
    page_dir = PurePosixPath(page_path).parent
    file_name = f"{sanitize_device_name(device_name)}_{page_stem(page_path)}{SCREENSHOT_SUFFIX}"
    return output_root.joinpath(*page_dir.parts) / file_name


def _write_bytes(path: Path, image_bytes: bytes) -> tuple[int, str]:
    path.write_bytes(image_bytes)
    return len(image_bytes), hashlib.md5(image_bytes).hexdigest()


async def write_screenshot(path: Path, image_bytes: bytes) -> tuple[int, str]:
    """
    Write screenshot bytes to disk; the parent directory must already exist.

    Returns (size_bytes, checksum). May raise OSError on write failure.
    """
    return await asyncio.to_thread(_write_bytes, path, image_bytes)


def relative_to_cwd(path: Path) -> str:
    """Path relative to the working directory for log output, absolute when outside it."""
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)
