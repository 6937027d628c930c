"""Pytest configuration and shared fixtures for pacscan tests.

Fixture trees are generated on disk once per session. Every package directory
(and the root of every tree) holds an ``index.py`` entry module that calls
pacscan, so scans started from it see that file as their caller.
"""

import asyncio
import importlib.util
import json
from pathlib import Path

import pacscan
import pytest
from pacscan import PackageInfo

# name -> {relative package directory: (name, version, main)}
FIXTURE_TREES: dict[str, dict[str, tuple[str, str, str | None]]] = {
    "flat": {
        "": ("flat", "1.0.0", "index.js"),
        "node_modules/foo": ("foo", "1.1.0", "index.js"),
        "node_modules/bar": ("bar", "1.2.0", "index"),
        "node_modules/@fu/fizz": ("@fu/fizz", "1.3.1", "index.js"),
        "node_modules/@fu/buzz": ("@fu/buzz", "1.3.2", "index.js"),
        "node_modules/@baz/fizz": ("@baz/fizz", "1.4.1", None),
        "node_modules/@baz/buzz": ("@baz/buzz", "1.4.2", "index.js"),
    },
    "nested": {
        "": ("nested", "1.0.0", "index.js"),
        "node_modules/foo": ("foo", "1.1.0", "index.js"),
        "node_modules/foo/node_modules/bar": ("bar", "1.2.0", "index"),
        "node_modules/foo/node_modules/@fu/fizz": ("@fu/fizz", "1.3.1", "index.js"),
        "node_modules/foo/node_modules/@fu/fizz/node_modules/@baz/buzz": ("@baz/buzz", "1.4.2", "index.js"),
        "node_modules/foo/node_modules/bar/node_modules/@fu/buzz": ("@fu/buzz", "1.3.2", "index.js"),
        "node_modules/foo/node_modules/bar/node_modules/@baz/fizz": ("@baz/fizz", "1.4.1", None),
    },
    "single": {
        "": ("single", "1.0.0", "index.js"),
    },
    "unpackaged": {
        "node_modules/foo": ("foo", "1.1.0", "index.js"),
        "node_modules/foo/node_modules/bar": ("bar", "1.2.0", "index"),
    },
    "unpackaged_single": {},
}

ENTRY_MODULE = '''"""Fixture entry point calling pacscan."""


async def scan(pacscan, options=None):
    return await pacscan.scan(options)


def scan_sync(pacscan, options=None):
    return pacscan.scan_sync(options)
'''


def write_package(directory: Path, name: str, version: str, main: str | None) -> None:
    """Write a package manifest (and an entry module) into a directory."""
    directory.mkdir(parents=True, exist_ok=True)
    manifest = {"name": name, "version": version}
    if main is not None:
        manifest["main"] = main
    (directory / "package.json").write_text(json.dumps(manifest, indent=2))
    (directory / "index.py").write_text(ENTRY_MODULE)


@pytest.fixture(scope="session")
def fixtures_dir(tmp_path_factory) -> Path:
    """Root directory holding every generated fixture tree."""
    root = tmp_path_factory.mktemp("fixtures")
    for tree, packages in FIXTURE_TREES.items():
        tree_dir = root / tree
        tree_dir.mkdir()
        (tree_dir / "index.py").write_text(ENTRY_MODULE)
        for relative, (name, version, main) in packages.items():
            write_package(tree_dir / relative, name, version, main)
    return root


@pytest.fixture
def load_entry(fixtures_dir):
    """Load the entry module at ``<tree>/<relative>/index.py``."""
    loaded = {}

    def _load(tree: str, relative: str = ""):
        file_path = fixtures_dir / tree / relative / "index.py"
        if file_path not in loaded:
            module_name = "fixture_" + "_".join(filter(None, [tree, *Path(relative).parts])).replace("@", "")
            spec = importlib.util.spec_from_file_location(module_name, file_path)
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            loaded[file_path] = module
        return loaded[file_path]

    return _load


@pytest.fixture(params=["sync", "async"])
def mode(request) -> str:
    """Run a test against both scan code paths."""
    return request.param


@pytest.fixture
def scan_from(load_entry, mode):
    """Scan with a fixture entry module as the caller, in the current mode."""

    def _scan(tree: str, relative: str = "", **options):
        entry = load_entry(tree, relative)
        if mode == "sync":
            return entry.scan_sync(pacscan, options)
        return asyncio.run(entry.scan(pacscan, options))

    return _scan


@pytest.fixture
def run_scan(mode):
    """Scan with explicit options (no fixture caller), in the current mode."""

    def _scan(**options):
        if mode == "sync":
            return pacscan.scan_sync(**options)
        return asyncio.run(pacscan.scan(**options))

    return _scan


@pytest.fixture
def expected(fixtures_dir):
    """Build the PackageInfo expected for a package in a fixture tree."""

    def _expected(tree: str, relative: str = "") -> PackageInfo:
        name, version, main = FIXTURE_TREES[tree][relative]
        directory = fixtures_dir / tree / relative if relative else fixtures_dir / tree
        return PackageInfo(
            directory=directory,
            main=directory / main if main is not None else None,
            name=name,
            version=version,
        )

    return _expected


@pytest.fixture(autouse=True)
def _clear_scan_caches():
    """Isolate tests from each other's cached lookups."""
    pacscan.clear_caches()
    yield
    pacscan.clear_caches()
