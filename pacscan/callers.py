"""Caller resolution - find the modules on the call stack that invoked us.

Walks Python frames from the innermost outward and reports each distinct
source file, skipping frames that cannot be meaningful callers:
- frames without a real file on disk (``<frozen ...>``, ``<stdin>``, ``<string>``)
- standard library modules (e.g. asyncio's event loop driving a coroutine)
- modules, or modules owned by packages, named in the excludes
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from types import FrameType

from .locator import find_owning_package_directory
from .locator import find_owning_package_directory_async
from .manifest import read_manifest
from .models import Caller
from .models import CallerOptions
from .models import PackageInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackEntry:
    """A source file on the call stack with the module it belongs to."""

    file: Path
    module: str | None


def capture_stack(frame: FrameType | None) -> list[StackEntry]:
    """Collect candidate stack entries from a frame outward.

    Consecutive frames from the same file collapse into one entry.
    """
    entries: list[StackEntry] = []
    previous_file = None

    while frame is not None:
        filename = frame.f_code.co_filename
        module = frame.f_globals.get("__name__")
        frame = frame.f_back

        if filename == previous_file:
            continue
        previous_file = filename

        if not os.path.isfile(filename) or _is_stdlib(module):
            continue
        entries.append(StackEntry(file=Path(os.path.abspath(filename)), module=module))

    return entries


def _is_stdlib(module: str | None) -> bool:
    if not module:
        return False
    return module.partition(".")[0] in sys.stdlib_module_names


def is_module_excluded(module: str | None, excludes: tuple[str, ...]) -> bool:
    """Check if a module, or the top-level package it belongs to, is excluded."""
    if not module:
        return False
    return module in excludes or module.partition(".")[0] in excludes


def _select_window(callers: list[Caller], options: CallerOptions) -> list[Caller]:
    callers = callers[options.offset :]
    if options.limit is not None:
        callers = callers[: options.limit]
    return callers


def _collect_needed(options: CallerOptions) -> int | None:
    if options.limit is None:
        return None
    return options.offset + options.limit


def _package_for(file: Path) -> PackageInfo | None:
    directory = find_owning_package_directory(file)
    return read_manifest(directory) if directory is not None else None


async def _package_for_async(file: Path) -> PackageInfo | None:
    directory = await find_owning_package_directory_async(file)
    if directory is None:
        return None
    return await asyncio.to_thread(read_manifest, directory)


def resolve_callers(entries: list[StackEntry], options: CallerOptions) -> list[Caller]:
    """Turn captured stack entries into callers, applying the options."""
    needed = _collect_needed(options)
    callers: list[Caller] = []

    for entry in entries:
        if needed is not None and len(callers) >= needed:
            break
        if is_module_excluded(entry.module, options.excludes):
            continue

        package = _package_for(entry.file)
        if package is not None and package.name in options.excludes:
            continue
        callers.append(Caller(file=entry.file, module=entry.module, package=package))

    return _select_window(callers, options)


async def resolve_callers_async(entries: list[StackEntry], options: CallerOptions) -> list[Caller]:
    """Async version of resolve_callers."""
    needed = _collect_needed(options)
    callers: list[Caller] = []

    for entry in entries:
        if needed is not None and len(callers) >= needed:
            break
        if is_module_excluded(entry.module, options.excludes):
            continue

        package = await _package_for_async(entry.file)
        if package is not None and package.name in options.excludes:
            continue
        callers.append(Caller(file=entry.file, module=entry.module, package=package))

    return _select_window(callers, options)


def find_callers(options: CallerOptions | None = None) -> list[Caller]:
    """Find the modules that called the function invoking this one.

    Args:
        options: Exclusion, limit and offset rules

    Returns:
        Callers ordered from the innermost frame outward

    Example:
        >>> callers = find_callers(CallerOptions(excludes=("mylib",), limit=1))
        >>> callers[0].file  # first module outside of mylib
    """
    options = options or CallerOptions()
    entries = capture_stack(inspect.currentframe().f_back)
    callers = resolve_callers(entries, options)
    logger.debug(f"Resolved {len(callers)} callers from {len(entries)} stack entries")
    return callers


async def find_callers_async(options: CallerOptions | None = None) -> list[Caller]:
    """Async version of find_callers.

    The stack is captured before the first suspension point; package lookups
    for the captured files run in worker threads.
    """
    options = options or CallerOptions()
    entries = capture_stack(inspect.currentframe().f_back)
    callers = await resolve_callers_async(entries, options)
    logger.debug(f"Resolved {len(callers)} callers from {len(entries)} stack entries")
    return callers
