"""Pacscan data models.

Defines the value types shared across the scan:
- PackageInfo: Normalized record for an installed package
- CallerOptions: Rules for identifying the module that invoked a scan
- Caller: A module found on the call stack
- ScanOptions: Parsed options for a single scan
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class PackageInfo:
    """An installed package, compared by value.

    Attributes:
        directory: Installation directory of the package
        main: Entry point file, or None when the manifest declares none
        name: Package name (e.g. ``@fu/fizz``)
        version: Package version as declared in the manifest
    """

    directory: Path
    main: Path | None
    name: str
    version: str

    def to_dict(self) -> dict[str, str | None]:
        """Serialize with string paths (for JSON output)."""
        return {
            "directory": str(self.directory),
            "main": str(self.main) if self.main is not None else None,
            "name": self.name,
            "version": self.version,
        }


@dataclass(frozen=True)
class CallerOptions:
    """Rules for walking the call stack.

    Attributes:
        excludes: Module or package names whose frames are never reported
        limit: Maximum number of callers to return (None = all)
        offset: Number of matching callers to skip
    """

    excludes: tuple[str, ...] = ()
    limit: int | None = None
    offset: int = 0

    @classmethod
    def parse(cls, value: CallerOptions | Mapping[str, Any] | None) -> CallerOptions:
        if value is None:
            return cls()
        if isinstance(value, CallerOptions):
            return value
        excludes = value.get("excludes") or ()
        if isinstance(excludes, str):
            excludes = (excludes,)
        return cls(
            excludes=tuple(excludes),
            limit=value.get("limit"),
            offset=value.get("offset") or 0,
        )

    def merged(self, excludes: Iterable[str], limit: int | None) -> CallerOptions:
        """Copy with extra excludes prepended and the limit overridden."""
        return CallerOptions(excludes=(*excludes, *self.excludes), limit=limit, offset=self.offset)


@dataclass(frozen=True)
class Caller:
    """A module found on the call stack."""

    file: Path
    module: str | None = None
    package: PackageInfo | None = None


@dataclass(frozen=True)
class ScanOptions:
    """Options for a single scan.

    Attributes:
        include_parents: Climb to the outermost owning package before scanning
        caller: Options forwarded to the caller resolver
        path: File or directory to scan from instead of the calling module
    """

    include_parents: bool = False
    caller: CallerOptions = field(default_factory=CallerOptions)
    path: Path | None = None

    @classmethod
    def parse(cls, options: ScanOptions | Mapping[str, Any] | None = None, **kwargs: Any) -> ScanOptions:
        """Normalize options given as an instance, a mapping and/or keyword arguments.

        Keyword arguments take precedence over values in ``options``.
        """
        if isinstance(options, ScanOptions) and not kwargs:
            return options

        values: dict[str, Any] = {}
        if isinstance(options, ScanOptions):
            values = {"include_parents": options.include_parents, "caller": options.caller, "path": options.path}
        elif options is not None:
            values = dict(options)
        values.update(kwargs)

        unknown = set(values) - {"include_parents", "caller", "path"}
        if unknown:
            raise TypeError(f"Unknown scan options: {', '.join(sorted(unknown))}")

        path = values.get("path")
        return cls(
            include_parents=bool(values.get("include_parents", False)),
            caller=CallerOptions.parse(values.get("caller")),
            path=Path(os.fspath(path)) if path is not None else None,
        )
