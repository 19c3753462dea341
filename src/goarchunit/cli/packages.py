"""Packages CLI command -- list application packages and their imports."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..engine import Architecture
from ..exceptions import ArchUnitError
from ..logging_config import get_logger, setup_logging
from ..patterns import is_standard_library
from . import app
from ._common import EXIT_FATAL, console, resolve_config

logger = get_logger(__name__)


@app.command()
def packages(
    root: Path = typer.Argument(Path("."), help="Root of the Go module", file_okay=False),
    source: Optional[str] = typer.Option(
        None, "--source", help="Package metadata source: auto, go or filesystem"
    ),
    std: bool = typer.Option(False, "--std", help="Include standard library imports"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
):
    """
    List application packages with their imports.

    Useful to write layer patterns and dependency rules.
    """
    setup_logging(verbose=verbose)
    try:
        arch = Architecture.load(root, resolve_config(root, source=source))
    except ArchUnitError as e:
        logger.debug(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(e.describe(verbose))}", highlight=False)
        raise typer.Exit(EXIT_FATAL)

    artifact = arch.artifact
    table = Table(title=f"Packages of {artifact.module}", show_header=True, show_lines=False)
    table.add_column("Package", style="cyan")
    table.add_column("Name")
    table.add_column("Files", justify="right")
    table.add_column("Imports")

    for pkg in artifact.packages(application_only=True):
        imports = [
            imp for imp in pkg.imports if std or not is_standard_library(imp, artifact)
        ]
        table.add_row(pkg.id, pkg.name, str(len(pkg.go_files)), "\n".join(imports) or "-")

    console.print(table)
