"""Config command implementation.

Shows the configuration the cleaner would run with.
"""

from pathlib import Path
from typing import Annotated

import typer

from blockclean.cli.types import OutputFormat
from blockclean.core.config import (
    CACHE_DIRS_KEY,
    FREE_SPACE_THRESHOLD_KEY,
    ConfigError,
    load_config,
)
from blockclean.utils.formatting import console, create_table, format_duration_ms, print_error

app = typer.Typer(
    help="Show the resolved configuration.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_config(
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config-file",
            "-c",
            help="TOML file with defaults; environment variables take precedence.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Validate and print the configuration from the environment."""
    try:
        config = load_config(config_file=config_file)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.TOML:
        typer.echo(config.to_toml(), nl=False)
        return

    table = create_table("Cleaner Configuration", "Key", "Value", "Meaning")
    for key, value in config.to_mapping().items():
        if key == CACHE_DIRS_KEY:
            meaning = f"{len(config.cache_dirs)} root dir(s)"
        elif key == FREE_SPACE_THRESHOLD_KEY:
            meaning = f"deep clean above {100 - config.free_space_threshold}% used"
        else:
            meaning = format_duration_ms(int(value))
        table.add_row(key, str(value), f"[muted]{meaning}[/muted]")
    console.print(table)
