"""Installation layout conventions.

Pure path helpers describing how packages are laid out on disk:

    <base>/package.json
    <base>/node_modules/<name>/package.json
    <base>/node_modules/@<scope>/<name>/package.json

No filesystem access happens here so the rules can be tested in isolation.
"""

from pathlib import Path
from pathlib import PurePath

MANIFEST_NAME = "package.json"
INSTALL_DIR_NAME = "node_modules"
SCOPE_PREFIX = "@"

# Unscoped and scoped packages at any depth beneath the base directory
MANIFEST_PATTERNS = (
    f"**/{INSTALL_DIR_NAME}/*/{MANIFEST_NAME}",
    f"**/{INSTALL_DIR_NAME}/{SCOPE_PREFIX}*/*/{MANIFEST_NAME}",
)


def is_scope_segment(name: str) -> bool:
    """Check if a directory name is a namespace scope (e.g. ``@babel``)."""
    return name.startswith(SCOPE_PREFIX)


def installation_root(package_dir: Path) -> Path | None:
    """Get the installation directory a package was installed into.

    The parent of the package directory is inspected, skipping one extra level
    when the package lives under a scope directory.

    Args:
        package_dir: Installation directory of a package

    Returns:
        The enclosing ``node_modules`` directory, or None if the package is not
        installed inside one

    Example:
        >>> installation_root(Path("/app/node_modules/@fu/fizz"))
        PosixPath('/app/node_modules')
        >>> installation_root(Path("/app")) is None
        True
    """
    parent = package_dir.parent
    if is_scope_segment(parent.name):
        parent = parent.parent

    if parent.name == INSTALL_DIR_NAME:
        return parent
    return None


def is_hidden(relative_path: str | PurePath) -> bool:
    """Check if any segment of a relative path is dot-prefixed."""
    return any(part.startswith(".") for part in PurePath(relative_path).parts)
