"""Run command implementation.

Starts the cleaning loop with configuration from the environment.
"""

import signal
from pathlib import Path
from types import FrameType
from typing import Annotated

import typer

from blockclean.cli.display import print_results
from blockclean.cli.types import ProbeChoice, make_probe
from blockclean.core.capacity import CapacityProbeError
from blockclean.core.config import ConfigError, load_config
from blockclean.core.scheduler import CleanScheduler, RootDirectoryError
from blockclean.utils.formatting import print_error, print_info

app = typer.Typer(
    help="Run the cleaner until terminated.",
    invoke_without_command=True,
)

_STOP_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGTERM, signal.SIGINT)


@app.callback(invoke_without_command=True)
def run_cleaner(
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config-file",
            "-c",
            help="TOML file with defaults; environment variables take precedence.",
        ),
    ] = None,
    probe: Annotated[
        ProbeChoice,
        typer.Option(
            "--probe",
            "-p",
            help="Disk usage probe: df or statvfs.",
            case_sensitive=False,
        ),
    ] = ProbeChoice.DF,
    once: Annotated[
        bool,
        typer.Option(
            "--once",
            help="Run a single iteration, wait for it and exit.",
        ),
    ] = False,
) -> None:
    """Clean every configured directory on a fixed interval."""
    try:
        config = load_config(config_file=config_file)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    scheduler = CleanScheduler(config, probe=make_probe(probe))

    try:
        if once:
            print_results(scheduler.run_once())
        else:
            _run_until_signalled(scheduler)
    except (RootDirectoryError, CapacityProbeError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _run_until_signalled(scheduler: CleanScheduler) -> None:
    """Run the scheduler loop, stopping it on SIGTERM or SIGINT."""

    def _handle_signal(signum: int, _frame: FrameType | None) -> None:
        print_info(f"Received {signal.Signals(signum).name}, finishing running passes...")
        scheduler.stop()

    previous = {sig: signal.signal(sig, _handle_signal) for sig in _STOP_SIGNALS}
    try:
        scheduler.run_forever()
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
