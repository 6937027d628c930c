"""Package manifest reading."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from .layout import MANIFEST_NAME
from .models import PackageInfo

logger = logging.getLogger(__name__)


def read_manifest(directory: str | os.PathLike[str]) -> PackageInfo:
    """Read the manifest of the package installed in a directory.

    Args:
        directory: Installation directory of the package

    Returns:
        PackageInfo built from the manifest. ``main`` is resolved against the
        directory, or None when the manifest declares no entry point.
    """
    directory = Path(directory)
    logger.debug(f"Reading package manifest in directory: {directory}")

    data = json.loads((directory / MANIFEST_NAME).read_text(encoding="utf-8"))

    main = data.get("main")
    return PackageInfo(
        directory=directory,
        main=Path(os.path.normpath(directory / main)) if main else None,
        name=data.get("name") or "",
        version=data.get("version") or "",
    )
