"""In-memory caches for repeat scans.

Installed packages do not move while a process is running, so lookups are
memoized for the lifetime of the process and only dropped on an explicit
clear (used by test suites).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generic
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cache_key(directory: str | os.PathLike[str]) -> str:
    """Normalize a directory into a cache key (absolute, no symlink resolution)."""
    return os.path.abspath(directory)


class DirectoryCache(Generic[T]):
    """Unbounded map from directory path to a value."""

    def __init__(self, name: str):
        self.name = name
        self._entries: dict[str, T] = {}

    def has(self, directory: str | os.PathLike[str]) -> bool:
        return cache_key(directory) in self._entries

    def get(self, directory: str | os.PathLike[str]) -> T | None:
        key = cache_key(directory)
        if key not in self._entries:
            return None
        logger.debug(f"Cache hit in {self.name} for directory: {directory}")
        return self._entries[key]

    def set(self, directory: str | os.PathLike[str], value: T) -> None:
        self._entries[cache_key(directory)] = value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DirectoryCache({self.name!r}, entries={len(self._entries)})"


class ScanCaches:
    """The caches used by a scanner.

    Attributes:
        manifest_paths: Sorted manifest file paths found beneath a base directory
        base_directories: Outermost owning package directory climbed to from a
            package directory (None when nothing could be found)
    """

    def __init__(self):
        self.manifest_paths: DirectoryCache[tuple[Path, ...]] = DirectoryCache("manifest_paths")
        self.base_directories: DirectoryCache[Path | None] = DirectoryCache("base_directories")

    def clear(self) -> None:
        """Drop every cached entry."""
        self.manifest_paths.clear()
        self.base_directories.clear()
        logger.debug("Cleared scan caches")


# Shared by the module-level scan functions
default_caches = ScanCaches()
