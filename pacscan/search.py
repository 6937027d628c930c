"""Glob search for files beneath a directory."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from .layout import is_hidden


def search(pattern: str, cwd: str | os.PathLike[str]) -> list[str]:
    """Find files matching a glob pattern.

    Results are unsorted, never include directories, and skip any match with a
    dot-prefixed segment.

    Args:
        pattern: Glob pattern relative to ``cwd`` (``**`` matches any depth)
        cwd: Directory to search beneath

    Returns:
        Matching paths relative to ``cwd`` in POSIX form
    """
    root = Path(cwd)
    matches = []
    for match in root.glob(pattern):
        relative = match.relative_to(root)
        if is_hidden(relative) or not match.is_file():
            continue
        matches.append(relative.as_posix())
    return matches


async def search_async(pattern: str, cwd: str | os.PathLike[str]) -> list[str]:
    """Async version of search (runs in a worker thread)."""
    return await asyncio.to_thread(search, pattern, cwd)
