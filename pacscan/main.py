"""Pacscan CLI - list the packages installed beneath a directory."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
import yaml
from pydantic import ValidationError
from rich.table import Table

from . import __version__
from .console import console
from .errors import PacscanError
from .logging_setup import init_json_logging
from .models import PackageInfo
from .models import ScanOptions
from .scanner import Scanner
from .settings import load_settings

logger = logging.getLogger(__name__)


def _render_table(packages: list[PackageInfo], base: Path) -> None:
    if not packages:
        console.print(f"[dim]No packages found beneath {base}[/dim]")
        return

    table = Table(title="Installed Packages")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Directory", style="dim")
    table.add_column("Main", style="dim")

    for package in packages:
        table.add_row(
            package.name,
            package.version,
            str(package.directory),
            str(package.main) if package.main is not None else "-",
        )

    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {len(packages)} packages")


@click.command()
@click.version_option(__version__, prog_name="pacscan")
@click.argument("path", required=False, type=click.Path(exists=True, path_type=Path))
@click.option(
    "--include-parents/--no-include-parents",
    default=None,
    help="Climb to the outermost package installing PATH before scanning",
)
@click.option("--async", "use_async", is_flag=True, help="Scan using the asynchronous code path")
@click.option("--json", "as_json", is_flag=True, help="Print packages as a JSON array")
@click.option("--log-file", type=click.Path(path_type=Path), help="Write debug logs as JSONL to this file")
def cli(path: Path | None, include_parents: bool | None, use_async: bool, as_json: bool, log_file: Path | None):
    """List the packages installed at PATH (defaults to the current directory)."""
    if log_file is not None:
        init_json_logging(log_file)

    try:
        settings = load_settings()
    except (yaml.YAMLError, ValidationError) as e:
        raise click.ClickException(f"Invalid pacscan settings: {e}") from e

    if include_parents is None:
        include_parents = settings.include_parents

    base = path or Path.cwd()
    options = ScanOptions.parse(path=base, include_parents=include_parents)
    scanner = Scanner(options)

    try:
        packages = asyncio.run(scanner.scan()) if use_async else scanner.scan_sync()
    except PacscanError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    logger.debug(f"Scan of {base} found {len(packages)} packages")

    if as_json:
        click.echo(json.dumps([package.to_dict() for package in packages], indent=2))
        return

    _render_table(packages, base)


def main():
    cli()


if __name__ == "__main__":
    main()
