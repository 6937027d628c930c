"""Sync and async execution of scan routines.

Scan logic is written once as generator routines. Whenever a routine needs
the filesystem or the call stack it yields an operation record and is resumed
with the result:

    def routine():
        directory = yield FindOwningPackage(path)
        package = yield ReadManifest(directory)
        return package

``run_sync`` performs each operation with a blocking call while ``run_async``
awaits the async version, so the only mode-specific code lives here.
Exceptions raised by an operation are thrown back into the routine at the
yield that requested it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from typing import TypeVar

from .callers import find_callers
from .callers import find_callers_async
from .locator import find_owning_package_directory
from .locator import find_owning_package_directory_async
from .manifest import read_manifest
from .models import CallerOptions
from .search import search
from .search import search_async

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FindOwningPackage:
    """Find the nearest package directory at or above a path."""

    path: Path


@dataclass(frozen=True)
class FindCallers:
    """Find the modules on the call stack outside of the excluded ones."""

    options: CallerOptions


@dataclass(frozen=True)
class ReadManifest:
    """Read the manifest of the package installed in a directory."""

    directory: Path


@dataclass(frozen=True)
class IsDirectory:
    """Check if a path is an existing directory."""

    path: Path


@dataclass(frozen=True)
class SearchFiles:
    """Find files matching any of the glob patterns (results concatenated, unsorted)."""

    patterns: tuple[str, ...]
    cwd: Path


Operation = FindOwningPackage | FindCallers | ReadManifest | IsDirectory | SearchFiles
Routine = Generator[Operation, Any, T]


def perform(operation: Operation) -> Any:
    """Perform an operation by blocking call."""
    if isinstance(operation, FindOwningPackage):
        return find_owning_package_directory(operation.path)
    if isinstance(operation, FindCallers):
        return find_callers(operation.options)
    if isinstance(operation, ReadManifest):
        return read_manifest(operation.directory)
    if isinstance(operation, IsDirectory):
        return operation.path.is_dir()
    if isinstance(operation, SearchFiles):
        file_paths: list[str] = []
        for pattern in operation.patterns:
            file_paths.extend(search(pattern, operation.cwd))
        return file_paths
    raise TypeError(f"Unsupported operation: {operation!r}")


async def perform_async(operation: Operation) -> Any:
    """Perform an operation, suspending until its result is ready."""
    if isinstance(operation, FindOwningPackage):
        return await find_owning_package_directory_async(operation.path)
    if isinstance(operation, FindCallers):
        return await find_callers_async(operation.options)
    if isinstance(operation, ReadManifest):
        return await asyncio.to_thread(read_manifest, operation.directory)
    if isinstance(operation, IsDirectory):
        return await asyncio.to_thread(operation.path.is_dir)
    if isinstance(operation, SearchFiles):
        results = await asyncio.gather(*(search_async(pattern, operation.cwd) for pattern in operation.patterns))
        return [file_path for result in results for file_path in result]
    raise TypeError(f"Unsupported operation: {operation!r}")


def run_sync(routine: Routine[T]) -> T:
    """Drive a routine to completion, blocking on every operation."""
    try:
        operation = next(routine)
        while True:
            try:
                result = perform(operation)
            except Exception as e:
                operation = routine.throw(e)
            else:
                operation = routine.send(result)
    except StopIteration as stop:
        return stop.value


async def run_async(routine: Routine[T]) -> T:
    """Drive a routine to completion, awaiting every operation in sequence."""
    try:
        operation = next(routine)
        while True:
            try:
                result = await perform_async(operation)
            except Exception as e:
                operation = routine.throw(e)
            else:
                operation = routine.send(result)
    except StopIteration as stop:
        return stop.value
