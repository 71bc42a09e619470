"""Usage command implementation.

Reports how full the filesystems behind the given directories are.
"""

from pathlib import Path
from typing import Annotated

import typer

from blockclean.cli.types import ProbeChoice, make_probe
from blockclean.core.capacity import CapacityProbeError
from blockclean.core.config import DEFAULT_FREE_SPACE_THRESHOLD
from blockclean.utils.formatting import console, create_table, print_error


def show_usage(
    directories: Annotated[
        list[Path],
        typer.Argument(help="Directories whose filesystems to check."),
    ],
    threshold: Annotated[
        int,
        typer.Option(
            "--threshold",
            "-t",
            min=0,
            max=100,
            help="Minimum free space in percent.",
        ),
    ] = DEFAULT_FREE_SPACE_THRESHOLD,
    probe: Annotated[
        ProbeChoice,
        typer.Option(
            "--probe",
            "-p",
            help="Disk usage probe: df or statvfs.",
            case_sensitive=False,
        ),
    ] = ProbeChoice.DF,
) -> None:
    """Show used space and whether a deep clean would be triggered."""
    usage_probe = make_probe(probe)
    limit = 100 - threshold

    table = create_table(f"Disk Usage (limit {limit}% used)", "Directory", "Used", "Status")
    for directory in directories:
        try:
            used = usage_probe.used_percent(directory)
        except CapacityProbeError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

        if used > limit:
            status = "[usage_over]deep clean[/usage_over]"
        else:
            status = "[usage_ok]ok[/usage_ok]"
        table.add_row(str(directory), f"{used}%", status)

    console.print(table)
