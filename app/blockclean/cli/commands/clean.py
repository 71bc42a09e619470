"""Clean command implementation.

Runs one reclaim pass over the given directories and reports the result.
"""

from pathlib import Path
from typing import Annotated

import typer

from blockclean.cli.display import print_results
from blockclean.core.config import DEFAULT_FILE_EXPIRED_TIME_MS
from blockclean.core.scheduler import RootDirectoryError, validate_root
from blockclean.reclaim.models import ReclaimResult
from blockclean.reclaim.reclaimer import DirectoryReclaimer
from blockclean.utils.formatting import print_error


def clean_dirs(
    directories: Annotated[
        list[Path],
        typer.Argument(help="Spark local directories to clean."),
    ],
    expiry_ms: Annotated[
        int,
        typer.Option(
            "--expiry-ms",
            "-e",
            min=0,
            help="Delete files older than this many milliseconds.",
        ),
    ] = DEFAULT_FILE_EXPIRED_TIME_MS,
) -> None:
    """Run a single reclaim pass over each directory."""
    for directory in directories:
        try:
            validate_root(directory)
        except RootDirectoryError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    reclaimer = DirectoryReclaimer()
    results: list[ReclaimResult] = [reclaimer.reclaim(d, expiry_ms) for d in directories]

    print_results(results)

    if any(not r.success for r in results):
        raise typer.Exit(code=1)
