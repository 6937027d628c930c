"""
Pacscan - find the packages installed alongside a module.

Walks the node_modules installation layout on disk, starting from the module
that called pacscan (or an explicit path), instead of reading dependency
declarations.

Public API:
- scan: Scan asynchronously
- scan_sync: Scan synchronously
- clear_caches: Reset the lookup caches (for test isolation)
- Scanner: Scanner bound to options and its own caches
- PackageInfo, ScanOptions, CallerOptions: Value types
- MissingSourceFileError: Raised when there is nothing to scan from
"""

from .errors import MissingSourceFileError
from .errors import PacscanError
from .models import CallerOptions
from .models import PackageInfo
from .models import ScanOptions
from .scanner import Scanner
from .scanner import clear_caches
from .scanner import scan
from .scanner import scan_sync

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "scan",
    "scan_sync",
    "clear_caches",
    "Scanner",
    "PackageInfo",
    "ScanOptions",
    "CallerOptions",
    "PacscanError",
    "MissingSourceFileError",
]
