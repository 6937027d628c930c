"""Nearest owning package lookup."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from .layout import MANIFEST_NAME

logger = logging.getLogger(__name__)


def find_owning_package_directory(path: str | os.PathLike[str]) -> Path | None:
    """Find the nearest directory at or above a path that contains a manifest.

    The path itself is checked first, so a package directory owns itself.
    Paths are made absolute without resolving symlinks.

    Args:
        path: File or directory to start from

    Returns:
        Installation directory of the owning package, or None if no ancestor
        contains a manifest
    """
    current = Path(os.path.abspath(path))

    for candidate in (current, *current.parents):
        if (candidate / MANIFEST_NAME).is_file():
            return candidate

    logger.debug(f"No package directory found for path: {current}")
    return None


async def find_owning_package_directory_async(path: str | os.PathLike[str]) -> Path | None:
    """Async version of find_owning_package_directory (runs in a worker thread)."""
    return await asyncio.to_thread(find_owning_package_directory, path)
