"""Rich console formatting utilities.

Provides consistent console output and logging setup for the CLI.
"""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from blockclean.core.theme import get_theme


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def setup_logging(level: int = logging.INFO) -> None:
    """Route log records to stderr through a Rich handler.

    A Rich handler installed by an earlier call is replaced, so calling it
    again only changes the level.

    Args:
        level: Root logger level.
    """
    handler = RichHandler(
        console=err_console,
        show_path=False,
        rich_tracebacks=True,
        log_time_format="[%Y-%m-%d %H:%M:%S]",
    )
    handler.setFormatter(logging.Formatter("%(threadName)s %(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def create_table(title: str, *columns: str) -> Table:
    """Create a pre-configured table with the shared header and border styles.

    Args:
        title: Table title.
        columns: Column headers, in order.

    Returns:
        Rich Table ready for ``add_row`` calls.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    for column in columns:
        table.add_column(column)
    return table


def format_size(size_bytes: int) -> str:
    """Format a byte count as a human-readable string.

    Args:
        size_bytes: Size in bytes.

    Returns:
        String such as "512 B", "1.5 KB" or "3.2 GB".
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = size_bytes / 1024
    for unit in ("KB", "MB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def format_duration_ms(millis: int) -> str:
    """Format a millisecond duration using the largest whole unit.

    Args:
        millis: Duration in milliseconds.

    Returns:
        String such as "7d", "5h", "30m", "12s" or "250ms".
    """
    for suffix, unit in (("d", 86_400_000), ("h", 3_600_000), ("m", 60_000), ("s", 1000)):
        if millis >= unit and millis % unit == 0:
            return f"{millis // unit}{suffix}"
    return f"{millis}ms"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
