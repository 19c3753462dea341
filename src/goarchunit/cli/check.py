"""Check CLI command -- run the bundled best-practice analyzers."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..analyzers import best_practices
from ..engine import Architecture
from ..exceptions import ArchUnitError, ViolationReport
from ..logging_config import get_logger, setup_logging
from . import app
from ._common import EXIT_FATAL, EXIT_VIOLATIONS, console, resolve_config

logger = get_logger(__name__)


@app.command()
def check(
    root: Path = typer.Argument(
        Path("."),
        help="Root of the Go module to check",
        file_okay=False,
        dir_okay=True,
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (TOML)", exists=True, dir_okay=False
    ),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", help="Maximum package folder depth", min=1
    ),
    config_folder: Optional[str] = typer.Option(
        None, "--config-folder", help="Folder that must hold configuration files"
    ),
    source: Optional[str] = typer.Option(
        None, "--source", help="Package metadata source: auto, go or filesystem"
    ),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Parser threads", min=1),
    json_output: bool = typer.Option(False, "--json", help="Output the report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    Check a Go project against the bundled best practices.

    Exit code 1 means violations were found, 2 means the project could not
    be loaded or the configuration is invalid.

    [bold cyan]Examples:[/bold cyan]

      goarchunit check

      goarchunit check ./service --max-depth 4 --source filesystem
    """
    setup_logging(verbose=verbose, quiet=quiet)
    try:
        settings = resolve_config(root, config, max_depth, config_folder, source, workers)
        arch = Architecture.load(root, settings)
    except ArchUnitError as e:
        logger.debug(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {escape(e.describe(verbose))}", highlight=False)
        raise typer.Exit(EXIT_FATAL)

    for error in arch.artifact.parse_errors:
        logger.warning(str(error))

    violations = arch.validate(
        best_practices(settings.max_package_depth, settings.config_folder)
    )

    if json_output:
        report = violations.report.to_json() if violations else ViolationReport().to_json()
        print(json.dumps(report, indent=2))
    elif violations is None:
        console.print("[green]No architecture violations found.[/green]")
    else:
        console.print(
            violations.report.render(), markup=False, highlight=False, soft_wrap=True, end=""
        )

    if violations is not None:
        raise typer.Exit(EXIT_VIOLATIONS)
