"""Scan orchestration.

A scan runs in three strictly ordered steps:
1. Resolve the base directory, from the ``path`` option or the calling module,
   climbing to the outermost owning package when ``include_parents`` is set.
2. Find every manifest beneath the base directory (plus the base package's own).
3. Read each manifest into a PackageInfo, dropping duplicates.

The steps are generator routines (see execution.py) so the same code serves
``scan`` and ``scan_sync``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .cache import ScanCaches
from .cache import default_caches
from .errors import MissingSourceFileError
from .execution import FindCallers
from .execution import FindOwningPackage
from .execution import IsDirectory
from .execution import ReadManifest
from .execution import Routine
from .execution import SearchFiles
from .execution import run_async
from .execution import run_sync
from .layout import MANIFEST_NAME
from .layout import MANIFEST_PATTERNS
from .layout import installation_root
from .models import PackageInfo
from .models import ScanOptions

logger = logging.getLogger(__name__)

# Frames from this library are never reported as the caller
PACKAGE_NAME = __name__.partition(".")[0]


class Scanner:
    """Scan for installed packages with fixed options.

    Args:
        options: Scan options (instance or mapping)
        caches: Caches to use; defaults to the process-wide caches reset by
            clear_caches()

    Example:
        >>> scanner = Scanner({"path": "/app", "include_parents": True})
        >>> for package in scanner.scan_sync():
        ...     print(package.name, package.version)
    """

    def __init__(
        self,
        options: ScanOptions | Mapping[str, Any] | None = None,
        caches: ScanCaches | None = None,
    ):
        self.options = ScanOptions.parse(options)
        self.caches = caches if caches is not None else default_caches

    def scan_sync(self) -> list[PackageInfo]:
        """Run the scan, blocking until complete."""
        return run_sync(self.scan_routine())

    async def scan(self) -> list[PackageInfo]:
        """Run the scan asynchronously."""
        return await run_async(self.scan_routine())

    def scan_routine(self) -> Routine[list[PackageInfo]]:
        base_directory = yield from self.resolve_base_directory()
        manifest_paths = yield from self.find_manifest_paths(base_directory)

        # dict keeps insertion order while dropping equal records
        packages: dict[PackageInfo, None] = {}
        for manifest_path in manifest_paths:
            package = yield ReadManifest(manifest_path.parent)
            packages.setdefault(package, None)

        return list(packages)

    def resolve_base_directory(self) -> Routine[Path]:
        """Determine the directory to scan beneath.

        Raises:
            MissingSourceFileError: If no path was given and no caller was found
        """
        if self.options.path is not None:
            file_path, package = yield from self._resolve_from_path()
        else:
            file_path, package = yield from self._resolve_from_caller()

        if file_path is None:
            raise MissingSourceFileError()
        file_path = Path(os.path.abspath(file_path))

        if package is None:
            is_directory = yield IsDirectory(file_path)
            directory = file_path if is_directory else file_path.parent
            logger.debug(f'Unable to find package containing "{file_path}" so using directory as base: {directory}')
            return directory

        logger.debug(f'Found package "{package.name}" containing file: {file_path}')

        if not self.options.include_parents:
            logger.debug(f"Using installation directory for package containing file as base: {package.directory}")
            return package.directory

        logger.debug(f'Attempting to find base parent package installation directory from package "{package.name}"')
        base_directory = yield from self.find_base_directory(package.directory)
        return base_directory if base_directory is not None else package.directory

    def _resolve_from_path(self) -> Routine[tuple[Path | None, PackageInfo | None]]:
        file_path = self.options.path
        directory = yield FindOwningPackage(file_path)
        package = None
        if directory is not None:
            package = yield ReadManifest(directory)
        return file_path, package

    def _resolve_from_caller(self) -> Routine[tuple[Path | None, PackageInfo | None]]:
        options = self.options.caller.merged(excludes=(PACKAGE_NAME,), limit=1)
        callers = yield FindCallers(options)
        if not callers:
            return None, None
        return callers[0].file, callers[0].package

    def find_base_directory(self, directory: Path) -> Routine[Path | None]:
        """Climb from a package directory to the outermost package installing it.

        Each step moves from a package to the ``node_modules`` directory it is
        installed in, then to the package owning that directory. The climb stops
        when a package is not installed inside ``node_modules`` or no owning
        package exists further up; the last package found is kept.

        Returns:
            The outermost package directory, or None if ``directory`` is not
            inside a package at all
        """
        cache = self.caches.base_directories
        base_directory = None
        current: Path | None = directory

        while current is not None:
            if cache.has(current):
                cached = cache.get(current)
                if cached is not None:
                    base_directory = cached
                break

            package_directory = yield FindOwningPackage(current)
            if package_directory is None:
                break

            base_directory = package_directory
            current = installation_root(package_directory)

        logger.debug(f"Resolved base directory {base_directory} from package directory: {directory}")
        cache.set(directory, base_directory)
        return base_directory

    def find_manifest_paths(self, base_directory: Path) -> Routine[tuple[Path, ...]]:
        """Find the manifests of all packages installed beneath a directory.

        The base directory's own manifest is included when it is a package.
        Paths are sorted by their path relative to the base directory so the
        order does not depend on the filesystem.
        """
        cache = self.caches.manifest_paths
        if cache.has(base_directory):
            return cache.get(base_directory)

        logger.debug(f"Attempting to find all package files within directory: {base_directory}")

        file_paths = yield SearchFiles(MANIFEST_PATTERNS, base_directory)
        owner = yield FindOwningPackage(base_directory)
        if owner == base_directory:
            file_paths = [MANIFEST_NAME, *file_paths]

        manifest_paths = tuple(base_directory / file_path for file_path in sorted(file_paths))
        cache.set(base_directory, manifest_paths)

        logger.debug(f"Found {len(manifest_paths)} package files within directory: {base_directory}")
        return manifest_paths


async def scan(options: ScanOptions | Mapping[str, Any] | None = None, **kwargs: Any) -> list[PackageInfo]:
    """Scan for packages installed alongside the calling module.

    Args:
        options: Scan options (instance or mapping)
        **kwargs: Individual options (``include_parents``, ``caller``, ``path``),
            overriding ``options``

    Returns:
        Installed packages ordered by manifest path

    Raises:
        MissingSourceFileError: If no path was given and no caller was found

    Example:
        >>> packages = await scan(include_parents=True)
        >>> [package.name for package in packages]
        ['@baz/buzz', 'bar', 'foo', 'my-app']
    """
    return await Scanner(ScanOptions.parse(options, **kwargs)).scan()


def scan_sync(options: ScanOptions | Mapping[str, Any] | None = None, **kwargs: Any) -> list[PackageInfo]:
    """Synchronous version of scan."""
    return Scanner(ScanOptions.parse(options, **kwargs)).scan_sync()


def clear_caches() -> None:
    """Reset the process-wide caches used by scan and scan_sync."""
    default_caches.clear()
