"""CLI entry point, registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="goarchunit",
    help="goarchunit - Architecture conformance checks for Go projects",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"goarchunit {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
):
    """Check Go projects against architecture rules and best practices."""


# Import subcommands to register them
from .check import check as _check  # noqa: F401, E402
from .packages import packages as _packages  # noqa: F401, E402


def main() -> None:
    app()
