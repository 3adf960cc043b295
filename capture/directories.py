"""
Target directory validation and the run-scoped output directory cache.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AbstractSet, Union

from shared.logging import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class InvalidTargetDirectoryError(Exception):
    """Base class for a target directory that cannot be served."""


class TargetDirectoryNotFoundError(InvalidTargetDirectoryError):
    """Raised when the target path does not resolve to an existing entry."""


class TargetNotADirectoryError(InvalidTargetDirectoryError):
    """Raised when the target path exists but is not a directory."""


def validate_target_directory(target_dir: PathLike) -> Path:
    """
    Return the canonical, symlink-resolved absolute path of target_dir.

    Raises TargetDirectoryNotFoundError or TargetNotADirectoryError.
    """
    abs_target = Path(target_dir).expanduser().absolute()
    try:
        real_target = abs_target.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise TargetDirectoryNotFoundError(
            f"Target directory does not exist: {abs_target}"
        ) from e

    if not real_target.is_dir():
        raise TargetNotADirectoryError(f"Target is not a directory: {real_target}")
    return real_target


class DirectoryCreationCache:
    """
    Remembers output directories already created during this run.

    The first caller for a path claims it before awaiting and starts the
    mkdir; later callers await that same creation. A failed creation drops
    the claim so the next caller retries.
    """

    def __init__(self) -> None:
        self._created: set[Path] = set()
        self._pending: dict[Path, asyncio.Future[None]] = {}

    @property
    def created(self) -> AbstractSet[Path]:
        return frozenset(self._created)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and Path(path) in self._created

    async def ensure(self, path: PathLike) -> None:
        directory = Path(path)
        if directory in self._created:
            return
        pending = self._pending.get(directory)
        if pending is None:
            pending = asyncio.ensure_future(self._create(directory))
            self._pending[directory] = pending
        # Shielded so one cancelled worker does not cancel the shared mkdir.
        await asyncio.shield(pending)

    async def _create(self, directory: Path) -> None:
        try:
            await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)
        finally:
            self._pending.pop(directory, None)
        self._created.add(directory)
        logger.debug("output_dir.created", path=str(directory))
