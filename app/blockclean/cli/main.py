"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer

from blockclean import __version__
from blockclean.cli.commands import clean, config, run, usage
from blockclean.utils.formatting import setup_logging

app = typer.Typer(
    name="blockclean",
    help="Remove stale Spark shuffle and cache files from local directories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"blockclean version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every file checked.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log warnings and errors.",
        ),
    ] = False,
) -> None:
    """blockclean - disk-space janitor for Spark local directories.

    Deletes shuffle and cache files older than a retention window and
    cleans more aggressively when free space runs low.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    setup_logging(level)


app.add_typer(run.app, name="run")
app.command(name="clean")(clean.clean_dirs)
app.command(name="usage")(usage.show_usage)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
